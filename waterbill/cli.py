# waterbill/cli.py
from __future__ import annotations
import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

from waterbill.config import PipelineConfig
from waterbill.extractors.errors import ExtractionError
from waterbill.extractors.pipeline import BillPipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract billing fields from water-bill PDFs")
    parser.add_argument("inputs", nargs="+", help="PDF or image files")
    parser.add_argument("--json", action="store_true", help="Compact JSON output")
    parser.add_argument("--templates", help="Template directory (overrides TEMPLATE_DIR)")
    parser.add_argument("--scratch", help="Scratch/debug directory (overrides DEBUG_DIR)")
    parser.add_argument("--keep-debug", action="store_true", help="Keep per-document crops")
    parser.add_argument("--engine", choices=["tesseract", "paddle"], help="OCR engine")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    config = PipelineConfig.from_env()
    if args.templates:
        config.template_root = Path(args.templates)
    if args.scratch:
        config.scratch_root = Path(args.scratch)
    if args.keep_debug:
        config.keep_scratch = True
    if args.engine:
        config.ocr_engine = args.engine

    pipeline = BillPipeline(config)
    if len(args.inputs) == 1:
        try:
            result = pipeline.process_document(args.inputs[0])
        except ExtractionError as e:
            logging.getLogger(__name__).error("%s: %s", type(e).__name__, e)
            return 2
        ok = result.get("ok") is not False
    else:
        result = pipeline.process_batch(args.inputs)
        ok = all(r.get("ok") for r in result["results"])

    if args.json:
        print(json.dumps(result, ensure_ascii=True))
    else:
        print(json.dumps(result, ensure_ascii=True, indent=2))
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
