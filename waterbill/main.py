# waterbill/main.py
from __future__ import annotations
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional
from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.utils import secure_filename

from waterbill.config import PipelineConfig
from waterbill.extractors.pipeline import BillPipeline

ALLOWED_EXTS = {".pdf", ".png", ".jpg", ".jpeg"}


def create_app(pipeline: Optional[BillPipeline] = None) -> Flask:
    app = Flask(__name__)
    CORS(app)

    upload_root = Path(os.getenv("UPLOAD_DIR") or Path(app.instance_path) / "uploads")
    upload_root.mkdir(parents=True, exist_ok=True)
    app.config["UPLOAD_DIR"] = upload_root
    app.config["PIPELINE"] = pipeline or BillPipeline(PipelineConfig.from_env())

    @app.get("/")
    def root():
        return jsonify({"ok": True, "service": "waterbill-extractor", "path": "/"}), 200

    @app.get("/health")
    def health():
        return jsonify({"ok": True, "status": "running"}), 200

    @app.post("/extract")
    def api_extract():
        files = [f for f in request.files.getlist("files") if getattr(f, "filename", "")]
        single = request.files.get("file")
        if single is not None and getattr(single, "filename", ""):
            files.insert(0, single)
        if not files:
            return _json_err("bad_request", "No file uploaded.", 400)
        for f in files:
            ext = Path(f.filename).suffix.lower()
            if ext not in ALLOWED_EXTS:
                return _json_err("unsupported_type", f"Unsupported extension: {ext}", 415)

        tmp = Path(tempfile.mkdtemp(dir=str(app.config["UPLOAD_DIR"])))
        try:
            saved: List[Path] = []
            names: List[str] = []
            for i, f in enumerate(files):
                dest = tmp / f"{i}_{secure_filename(f.filename) or 'upload'}"
                f.save(dest)
                saved.append(dest)
                names.append(f.filename)

            pl: BillPipeline = app.config["PIPELINE"]
            if len(saved) == 1:
                result: Dict[str, Any] = pl.process_document(saved[0], names[0])
                # le nom d'origine, pas celui du fichier temporaire
                result["File_Name"] = names[0]
                return jsonify(result)
            return jsonify(pl.process_batch(saved, names))
        except Exception as e:
            return _json_err("internal_error", str(e), 500)
        finally:
            shutil.rmtree(tmp, ignore_errors=True)

    return app


def _json_err(code: str, msg: str, status: int):
    return jsonify({"ok": False, "error": {"code": code, "message": msg}}), status
