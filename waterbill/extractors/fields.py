# waterbill/extractors/fields.py
from __future__ import annotations
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .dates import billing_period
from .errors import RecognitionFailure
from .io_pdf_image import crop_to_file, image_size, scale_rect
from .patterns import ADDRESS_STOP_WORDS
from .templates import ADDRESS_FIELD, FieldBox, Template
from .utils_amounts import clean_numeric

logger = logging.getLogger(__name__)

# fields printed below the address block; they move with its line count
OFFSET_FIELDS = frozenset([
    "No. Meter",
    "Bilangan Hari - Start",
    "Bilangan Hari - End",
    "Baki Terdahulu",
    "Bil Semasa",
    "Jumlah Perlu Dibayar",
    "Penggunaan (m3)",
])

NUMERIC_FIELDS = frozenset([
    "Bil Semasa",
    "Jumlah Perlu Dibayar",
    "Baki Terdahulu",
    "Cagaran",
    "Penggunaan (m3)",
])

START_KEYS = ("Bilangan Hari - Start", "Bilangan_Hari_-_Start")
END_KEYS = ("Bilangan Hari - End", "Bilangan_Hari_-_End")
PERIOD_KEY = "Tempoh Bil"
DAYS_KEY = "Bilangan Hari"

BASELINE_ADDRESS_LINES = 6
LINE_PITCH = 50


def address_lines(text: Optional[str]) -> List[str]:
    return [l.strip() for l in re.split(r"\n+", text or "") if l.strip()]


def clean_address(text: Optional[str]) -> str:
    """Cut the block after the last line naming a state or federal territory."""
    lines = address_lines(text)
    last = -1
    for i, line in enumerate(lines):
        low = line.lower()
        if any(w in low for w in ADDRESS_STOP_WORDS):
            last = i
    if last != -1:
        lines = lines[:last + 1]
    return "\n".join(lines)


def count_address_lines(text: Optional[str]) -> int:
    n = len(address_lines(text))
    return n if n else BASELINE_ADDRESS_LINES


def address_offset(n_lines: int) -> int:
    return -(BASELINE_ADDRESS_LINES - n_lines) * LINE_PITCH


def crop_filename(field_name: str) -> str:
    return re.sub(r"[^\w.\-]+", "_", field_name).strip("_") + ".png"


def crop_filenames(field_names: List[str]) -> Dict[str, str]:
    """Field name -> crop file name, suffixed when two spellings collide."""
    out: Dict[str, str] = {}
    used = set()
    for name in field_names:
        base = crop_filename(name)[:-len(".png")]
        candidate, n = base, 1
        while candidate in used:
            n += 1
            candidate = f"{base}_{n}"
        used.add(candidate)
        out[name] = candidate + ".png"
    return out


def _first_present(results: Dict[str, str], keys: Tuple[str, ...]) -> Optional[str]:
    for k in keys:
        if results.get(k):
            return results[k]
    return None


def attach_billing_period(results: Dict[str, str]) -> Dict[str, str]:
    """
    Replace the raw start/end date fields with "Tempoh Bil" and
    "Bilangan Hari". Both are left out when either date is unusable.
    """
    start = _first_present(results, START_KEYS)
    end = _first_present(results, END_KEYS)
    for k in START_KEYS + END_KEYS:
        results.pop(k, None)

    period = billing_period(start, end)
    if period is None:
        if start or end:
            logger.warning("missing start/end date: start=%r end=%r", start, end)
        return results
    results[PERIOD_KEY], results[DAYS_KEY] = period
    logger.info("computed Tempoh Bil: %s (%s days)", *period)
    return results


class TemplateFieldExtractor:
    """
    Crops every template box out of a normalized page and reads it.
    The address goes first: its line count shifts the boxes in OFFSET_FIELDS.
    """

    def __init__(self, recognizer, canvas: Tuple[int, int] = (2481, 3509), max_workers: int = 4):
        self.recognizer = recognizer
        self.canvas = canvas
        self.max_workers = max(1, max_workers)

    def extract(self, image_path: Path, template: Template, region: str, crops_dir: Path) -> Dict[str, str]:
        logger.info("OCR process start for %s", region)
        crops_dir = Path(crops_dir)
        crops_dir.mkdir(parents=True, exist_ok=True)
        width, height = image_size(image_path)
        sx, sy = width / self.canvas[0], height / self.canvas[1]
        results: Dict[str, str] = {}
        files = crop_filenames(list(template.fields))

        address = ""
        if template.address is not None:
            try:
                text = self._read(image_path, template.address, sx, sy, 0, crops_dir / files[ADDRESS_FIELD])
                address = clean_address(text)
            except (RecognitionFailure, OSError, ValueError) as e:
                logger.warning("OCR failed for %s: %s", ADDRESS_FIELD, e)
            results[ADDRESS_FIELD] = address
        offset = address_offset(count_address_lines(address))

        boxes = template.value_fields()
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [
                (box.name, pool.submit(self._read_field, image_path, box, sx, sy, offset,
                                       crops_dir / files[box.name]))
                for box in boxes
            ]
            for name, fut in futures:
                results[name] = fut.result()

        return attach_billing_period(results)

    def _read_field(self, image_path: Path, box: FieldBox, sx: float, sy: float,
                    offset: int, crop_path: Path) -> str:
        applied = offset if box.name in OFFSET_FIELDS else 0
        try:
            text = self._read(image_path, box, sx, sy, applied, crop_path)
        except (RecognitionFailure, OSError, ValueError) as e:
            logger.warning("OCR failed for %s: %s", box.name, e)
            return ""
        if box.name in NUMERIC_FIELDS:
            text = clean_numeric(text)
        logger.debug("OCR %s: %r", box.name, text)
        return text

    def _read(self, image_path: Path, box: FieldBox, sx: float, sy: float,
              offset: int, crop_path: Path) -> str:
        rect = scale_rect(box.x, box.y + offset, box.w, box.h, sx, sy)
        crop_to_file(image_path, rect, crop_path)
        return self.recognizer.recognize(crop_path).strip()
