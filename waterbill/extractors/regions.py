# waterbill/extractors/regions.py
from __future__ import annotations
import logging
import re
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .errors import RecognitionFailure
from .io_pdf_image import crop_to_file, image_size, pdf_text, scale_rect
from .patterns import (
    SELANGOR_RE, MELAKA_RE, NEGERI_SEMBILAN_RE, KEDAH_RE,
    JOHOR_FRAGMENTS, JOHOR_PROBE_RE, SELANGOR2_MARKERS,
)

logger = logging.getLogger(__name__)


class Region(str, Enum):
    SELANGOR = "Selangor"
    SELANGOR2 = "Selangor2"
    MELAKA = "Melaka"
    NEGERI_SEMBILAN = "Negeri-Sembilan"
    KEDAH = "Kedah"
    JOHOR = "Johor"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


def _squash(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").lower())


def _has_johor_fragment(t: str) -> bool:
    return any(f in t for f in JOHOR_FRAGMENTS)


# priority order matters: reference letterheads can name several providers
KEYWORD_RULES: List[Tuple[Region, Callable[[str], object]]] = [
    (Region.SELANGOR, SELANGOR_RE.search),
    (Region.MELAKA, MELAKA_RE.search),
    (Region.NEGERI_SEMBILAN, NEGERI_SEMBILAN_RE.search),
    (Region.KEDAH, KEDAH_RE.search),
    (Region.JOHOR, _has_johor_fragment),
]

# canonical-canvas rectangle where the two Selangor layouts differ
SELANGOR_PROBE = (1600, 250, 800, 250)
PROBE_MAX_HEIGHT = 400


def match_region(text: str) -> Optional[Region]:
    t = _squash(text)
    for region, test in KEYWORD_RULES:
        if test(t):
            return region
    return None


def match_probe_text(text: str) -> Optional[Region]:
    return Region.JOHOR if JOHOR_PROBE_RE.search(_squash(text)) else None


def is_selangor2(probe_text: str) -> bool:
    t = (probe_text or "").lower()
    return all(marker in t for marker in SELANGOR2_MARKERS)


class RegionClassifier:
    """
    Text layer keywords first; header/footer OCR when nothing matches;
    then the Selangor sub-layout probe.
    """

    def __init__(self, recognizer, canvas: Tuple[int, int] = (2481, 3509), min_text_chars: int = 100):
        self.recognizer = recognizer
        self.canvas = canvas
        self.min_text_chars = min_text_chars

    def document_text(self, src: Path, image_path: Path) -> str:
        text, info = pdf_text(src)
        if info.get("error"):
            logger.warning("text layer unreadable for %s: %s", Path(src).name, info["error"])
        if len((text or "").strip()) >= self.min_text_chars:
            return text
        logger.info("text layer too short for %s, full-page OCR", Path(src).name)
        # an engine failure here is a document error, not an unknown provider
        return self.recognizer.recognize(image_path)

    def classify(self, src: Path, image_path: Path, work_dir: Path, text: Optional[str] = None) -> Region:
        if text is None:
            text = self.document_text(src, image_path)
        region = match_region(text)
        if region is None:
            logger.info("keyword scan found no provider, OCR header/footer check")
            region = self.probe_header_footer(image_path, work_dir)
        if region is Region.SELANGOR:
            region = self.detect_layout_variant(image_path, work_dir)
        return region

    def probe_header_footer(self, image_path: Path, work_dir: Path) -> Region:
        width, height = image_size(image_path)
        crop_h = min(PROBE_MAX_HEIGHT, round(height * 0.25))
        header = Path(work_dir) / "probe_header.png"
        footer = Path(work_dir) / "probe_footer.png"
        try:
            crop_to_file(image_path, (0, 0, width, crop_h), header)
            crop_to_file(image_path, (0, round(height * 0.75), width, crop_h), footer)
            combined = self.recognizer.recognize(header) + " " + self.recognizer.recognize(footer)
        except (RecognitionFailure, OSError) as e:
            logger.warning("header/footer OCR scan failed: %s", e)
            return Region.UNKNOWN

        region = match_probe_text(combined)
        if region is None:
            return Region.UNKNOWN
        logger.info("header/footer OCR detected %s keywords", region)
        return region

    def detect_layout_variant(self, image_path: Path, work_dir: Path) -> Region:
        width, height = image_size(image_path)
        sx, sy = width / self.canvas[0], height / self.canvas[1]
        crop = Path(work_dir) / "layout_probe.png"
        try:
            crop_to_file(image_path, scale_rect(*SELANGOR_PROBE, sx, sy), crop)
            probe = self.recognizer.recognize(crop)
        except (RecognitionFailure, OSError) as e:
            logger.warning("Selangor layout probe failed, keeping base layout: %s", e)
            return Region.SELANGOR
        return Region.SELANGOR2 if is_selangor2(probe) else Region.SELANGOR
