# waterbill/extractors/recognizers.py
from __future__ import annotations
import threading
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pytesseract
from PIL import Image, ImageOps

from .errors import RecognitionFailure

PathLike = Union[str, Path]

# PaddleOCR est optionnel : import paresseux, un seul modèle par process
_PADDLE_OCR = None  # type: ignore
_PADDLE_LOCK = threading.Lock()


def _tess_config() -> str:
    # LSTM, uniform block of text; no char blacklist, dates need '/' and '-'
    return "--oem 1 --psm 6"


class BaseRecognizer:
    engine = "none"

    def recognize(self, image_path: PathLike) -> str:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class TesseractRecognizer(BaseRecognizer):
    """
    recognize(image) -> text. Each call runs its own tesseract process, so one
    instance can serve concurrent field crops.
    """

    engine = "tesseract"

    def __init__(self, lang: str = "eng", config: Optional[str] = None):
        self.lang = lang
        self.config = config if config is not None else _tess_config()

    def recognize(self, image_path: PathLike) -> str:
        try:
            with Image.open(str(image_path)) as img:
                gray = ImageOps.grayscale(img)
                txt = pytesseract.image_to_string(gray, lang=self.lang, config=self.config) or ""
        except (pytesseract.TesseractError, OSError) as e:
            raise RecognitionFailure(f"ocr_error:{e}") from e
        return txt.replace("\u00a0", " ")


def _get_paddle(lang: str = "en"):
    global _PADDLE_OCR
    if _PADDLE_OCR is None:
        from paddleocr import PaddleOCR  # import tardif
        _PADDLE_OCR = PaddleOCR(lang=lang, use_angle_cls=True, show_log=False)
    return _PADDLE_OCR


class PaddleRecognizer(BaseRecognizer):
    """PaddleOCR det+rec. The shared model is not re-entrant: calls are serialized."""

    engine = "paddle"

    def __init__(self, lang: str = "en", min_score: float = 0.5):
        self.lang = lang
        self.min_score = min_score

    def recognize(self, image_path: PathLike) -> str:
        try:
            with Image.open(str(image_path)) as img:
                arr = np.array(img.convert("L"))
            with _PADDLE_LOCK:
                result = _get_paddle(self.lang).ocr(arr, cls=True)
        except (OSError, RuntimeError, ValueError) as e:
            raise RecognitionFailure(f"paddle_error:{e}") from e

        lines = []
        # result: list[pages] -> list[[bbox, (text, score)], ...]
        if result and result[0]:
            for det in result[0]:
                text, score = det[1]
                if text and score >= self.min_score:
                    lines.append(text)
        return "\n".join(lines)


def make_recognizer(engine: str = "tesseract", lang: str = "eng"):
    if engine == "paddle":
        return PaddleRecognizer(lang="en" if lang == "eng" else lang)
    return TesseractRecognizer(lang=lang)
