# waterbill/extractors/pipeline.py
from __future__ import annotations
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from waterbill.config import PipelineConfig

from .fields import TemplateFieldExtractor
from .io_pdf_image import rasterize
from .recognizers import BaseRecognizer, make_recognizer
from .region_parsers import parse_fields
from .regions import Region, RegionClassifier
from .standardize import standardize
from .templates import TemplateStore

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

UNKNOWN_REGION_MESSAGE = "Unknown region"


def unknown_region_result(file_name: str) -> Dict[str, Any]:
    return {"ok": False, "message": UNKNOWN_REGION_MESSAGE, "File_Name": file_name}


class BillPipeline:
    """
    rasterize -> classify -> template lookup -> field OCR -> region parser
    -> standardize, one document at a time. Every document works in its own
    scratch directory under config.scratch_root.
    """

    def __init__(self, config: Optional[PipelineConfig] = None,
                 recognizer_factory: Optional[Callable[[], BaseRecognizer]] = None,
                 templates: Optional[TemplateStore] = None):
        self.config = config or PipelineConfig.from_env()
        self.templates = templates or TemplateStore(self.config.template_root)
        self._recognizer_factory = recognizer_factory or self._default_recognizer
        self.config.ensure_dirs()

    @property
    def canvas(self):
        return self.config.canvas_width, self.config.canvas_height

    def _default_recognizer(self) -> BaseRecognizer:
        return make_recognizer(self.config.ocr_engine, self.config.ocr_lang)

    def _run_dir(self, src: Path) -> Path:
        return Path(tempfile.mkdtemp(prefix=f"{src.stem}_", dir=str(self.config.scratch_root)))

    def process_document(self, path: PathLike, file_name: Optional[str] = None) -> Dict[str, Any]:
        src = Path(path)
        name = file_name or src.name
        logger.info("Processing: %s", name)
        run_dir = self._run_dir(src)
        try:
            with self._recognizer_factory() as recognizer:
                return self._process(src, name, run_dir, recognizer)
        finally:
            if not self.config.keep_scratch:
                shutil.rmtree(run_dir, ignore_errors=True)

    def _process(self, src: Path, name: str, run_dir: Path, recognizer: BaseRecognizer) -> Dict[str, Any]:
        image = rasterize(src, run_dir, dpi=self.config.dpi, size=self.canvas)

        classifier = RegionClassifier(recognizer, self.canvas, self.config.min_text_chars)
        region = classifier.classify(src, image, run_dir)
        if region is Region.UNKNOWN:
            logger.warning("Unknown region: %s", name)
            return unknown_region_result(name)
        logger.info("Region detected for %s: %s", name, region)

        template = self.templates.load(region)
        extractor = TemplateFieldExtractor(recognizer, self.canvas, self.config.max_workers)
        raw = extractor.extract(image, template, region.value, run_dir / "crops")

        record = parse_fields(region, raw)
        record["File Name"] = name
        record["Region"] = region.value
        return standardize(record)

    def process_batch(self, paths: Sequence[PathLike],
                      names: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """One entry per document; a failing document never stops the batch."""
        results: List[Dict[str, Any]] = []
        for i, path in enumerate(paths):
            name = names[i] if names else Path(path).name
            try:
                out = self.process_document(path, name)
            except Exception as e:
                logger.warning("extraction failed for %s: %s: %s", name, type(e).__name__, e)
                results.append({
                    "ok": False,
                    "File_Name": name,
                    "message": str(e) or type(e).__name__,
                    "error": type(e).__name__,
                })
                continue
            if out.get("ok") is False:
                results.append(out)
            else:
                results.append({"ok": True, "File_Name": name, "data": out})
        return {"ok": True, "total": len(results), "results": results}
