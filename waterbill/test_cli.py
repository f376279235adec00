import io
import json
import unittest
from contextlib import redirect_stdout
from unittest import mock

from waterbill import cli
from waterbill.extractors.errors import RasterizationFailure


class TestCli(unittest.TestCase):
    def _run(self, argv, pipeline):
        buf = io.StringIO()
        with mock.patch.object(cli, "BillPipeline", return_value=pipeline) as cls, redirect_stdout(buf):
            code = cli.main(argv)
        return code, buf.getvalue(), cls.call_args[0][0]

    def test_single_document(self) -> None:
        pipeline = mock.Mock()
        pipeline.process_document.return_value = {"File_Name": "a.pdf", "Region": "Kedah"}
        code, out, config = self._run(["a.pdf", "--json", "--engine", "paddle", "--keep-debug"], pipeline)
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["Region"], "Kedah")
        self.assertEqual(config.ocr_engine, "paddle")
        self.assertTrue(config.keep_scratch)

    def test_unknown_region_exit_code(self) -> None:
        pipeline = mock.Mock()
        pipeline.process_document.return_value = {"ok": False, "message": "Unknown region", "File_Name": "a.pdf"}
        code, _, _ = self._run(["a.pdf"], pipeline)
        self.assertEqual(code, 1)

    def test_failure_exit_code(self) -> None:
        pipeline = mock.Mock()
        pipeline.process_document.side_effect = RasterizationFailure("bad pdf")
        code, out, _ = self._run(["a.pdf"], pipeline)
        self.assertEqual((code, out), (2, ""))

    def test_batch(self) -> None:
        pipeline = mock.Mock()
        pipeline.process_batch.return_value = {
            "ok": True, "total": 2,
            "results": [{"ok": True, "File_Name": "a.pdf", "data": {}},
                        {"ok": False, "File_Name": "b.pdf", "message": "x", "error": "TemplateMissing"}],
        }
        code, out, _ = self._run(["a.pdf", "b.pdf", "--templates", "/tmp/tpl"], pipeline)
        self.assertEqual(code, 1)
        self.assertEqual(json.loads(out)["total"], 2)
        pipeline.process_batch.assert_called_once_with(["a.pdf", "b.pdf"])


if __name__ == "__main__":
    unittest.main()
