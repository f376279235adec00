# waterbill/config.py
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

PACKAGE_TEMPLATES = Path(__file__).resolve().parent / "templates"

# A4 at ~300 DPI; every template is authored against this canvas
CANVAS_WIDTH = 2481
CANVAS_HEIGHT = 3509


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    return int(raw) if raw.strip().isdigit() else default


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class PipelineConfig:
    scratch_root: Path = Path("debug_text")
    template_root: Path = PACKAGE_TEMPLATES
    dpi: int = 300
    canvas_width: int = CANVAS_WIDTH
    canvas_height: int = CANVAS_HEIGHT
    ocr_lang: str = "eng"
    ocr_engine: str = "tesseract"   # tesseract | paddle
    max_workers: int = 4
    keep_scratch: bool = False
    min_text_chars: int = 100

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        load_dotenv()
        return cls(
            scratch_root=Path(os.getenv("DEBUG_DIR") or "debug_text"),
            template_root=Path(os.getenv("TEMPLATE_DIR") or PACKAGE_TEMPLATES),
            dpi=_env_int("RASTER_DPI", 300),
            ocr_lang=os.getenv("OCR_LANG", "eng"),
            ocr_engine=(os.getenv("OCR_ENGINE") or "tesseract").lower(),
            max_workers=max(1, _env_int("OCR_MAX_WORKERS", 4)),
            keep_scratch=_env_flag("KEEP_DEBUG"),
            min_text_chars=_env_int("MIN_TEXT_CHARS", 100),
        )

    def ensure_dirs(self) -> None:
        Path(self.scratch_root).mkdir(parents=True, exist_ok=True)
