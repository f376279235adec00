# waterbill/extractors/io_pdf_image.py
from __future__ import annotations
import logging
import math
from pathlib import Path
from typing import Dict, Tuple, Union

from PIL import Image
import pypdfium2 as pdfium

from .errors import RasterizationFailure, RecognitionFailure

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
Rect = Tuple[int, int, int, int]  # (left, top, width, height)

IMAGE_EXTS = {".png", ".jpg", ".jpeg"}


def _half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def _render_first_page(p: Path, dpi: int, dest: Path) -> None:
    try:
        doc = pdfium.PdfDocument(str(p))
    except (pdfium.PdfiumError, OSError) as e:
        raise RasterizationFailure(f"cannot open {p.name}: {e}") from e
    try:
        if len(doc) == 0:
            raise RasterizationFailure(f"{p.name} has no pages")
        page = doc.get_page(0)
        pil = page.render(scale=dpi / 72.0).to_pil()
        page.close()
        pil.save(str(dest))
    except (pdfium.PdfiumError, OSError) as e:
        raise RasterizationFailure(f"render failed for {p.name}: {e}") from e
    finally:
        doc.close()


def rasterize(src: PathLike, out_dir: PathLike, dpi: int = 300,
              size: Tuple[int, int] = (2481, 3509)) -> Path:
    """
    First page of a PDF (or an image file as is) -> PNG stretched to `size`.
    The raw render is written next to the result and removed once resized.
    """
    p = Path(src)
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    raw_path = out / f"{p.stem}_raw.png"
    final_path = out / f"{p.stem}.png"

    if p.suffix.lower() in IMAGE_EXTS:
        try:
            with Image.open(str(p)) as img:
                img.convert("RGB").save(str(raw_path))
        except OSError as e:
            raise RasterizationFailure(f"cannot read image {p.name}: {e}") from e
    else:
        _render_first_page(p, dpi, raw_path)

    if not raw_path.exists():
        raise RasterizationFailure(f"no raster produced for {p.name}")

    with Image.open(str(raw_path)) as img:
        img.resize(size).save(str(final_path))
    raw_path.unlink()
    logger.debug("rasterized %s -> %s", p.name, final_path)
    return final_path


def pdf_text(p: PathLike) -> Tuple[str, Dict]:
    """Text layer of every page; empty for images and scanned PDFs."""
    p = Path(p)
    info: Dict = {"engine": "pypdfium2"}
    if p.suffix.lower() != ".pdf":
        info["engine"] = "none"
        return "", info
    try:
        doc = pdfium.PdfDocument(str(p))
    except (pdfium.PdfiumError, OSError) as e:
        info["error"] = f"pdf_read_error:{type(e).__name__}:{e}"
        return "", info
    chunks = []
    try:
        for i in range(len(doc)):
            page = doc.get_page(i)
            textpage = page.get_textpage()
            chunks.append(textpage.get_text_range() or "")
            textpage.close()
            page.close()
    except pdfium.PdfiumError as e:
        info["error"] = f"pdf_text_error:{e}"
    finally:
        doc.close()
    return "\n".join(chunks).replace("\u00a0", " "), info


def image_size(image_path: PathLike) -> Tuple[int, int]:
    with Image.open(str(image_path)) as img:
        return img.size


def scale_rect(x: float, y: float, w: float, h: float, sx: float, sy: float) -> Rect:
    return _half_up(x * sx), _half_up(y * sy), _half_up(w * sx), _half_up(h * sy)


def crop_to_file(image_path: PathLike, rect: Rect, dest: PathLike) -> Path:
    """Crop `rect` (clamped to the page) into `dest`."""
    left, top, width, height = rect
    with Image.open(str(image_path)) as img:
        iw, ih = img.size
        box = (max(0, left), max(0, top), min(iw, left + width), min(ih, top + height))
        if box[2] <= box[0] or box[3] <= box[1]:
            raise RecognitionFailure(f"crop {rect} is outside the {iw}x{ih} page")
        img.crop(box).save(str(dest))
    return Path(dest)
