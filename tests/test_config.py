import json
import tempfile
import unittest
from pathlib import Path

from vision_kit.config import PipelineConfig, load_pipeline_config


class TestPipelineConfig(unittest.TestCase):
    def _write_config(self, payload) -> Path:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        path = Path(tmpdir.name) / "pipeline.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_load_ok(self) -> None:
        path = self._write_config(
            {
                "conf_threshold": 0.4,
                "iou_threshold": 0.5,
                "apply_nms": False,
                "model_size": [320, 256],
                "ref_size": 256,
                "max_size": [1024, 768],
                "stride": 32,
                "max_workers": 4,
            }
        )
        cfg = load_pipeline_config(path)
        self.assertIsInstance(cfg, PipelineConfig)
        self.assertEqual(cfg.conf_threshold, 0.4)
        self.assertEqual(cfg.iou_threshold, 0.5)
        self.assertFalse(cfg.apply_nms)
        self.assertEqual(cfg.model_size, (320, 256))
        self.assertEqual(cfg.max_size, (1024, 768))
        self.assertEqual(cfg.max_workers, 4)

    def test_missing_keys_use_defaults(self) -> None:
        cfg = load_pipeline_config(self._write_config({}))
        self.assertEqual(cfg, PipelineConfig())
        self.assertEqual(cfg.conf_threshold, 0.5)
        self.assertIsNone(cfg.max_size)

    def test_unknown_keys_rejected(self) -> None:
        with self.assertRaises(ValueError):
            load_pipeline_config(self._write_config({"providers": ["CPUExecutionProvider"]}))

    def test_invalid_values_rejected(self) -> None:
        bad_payloads = [
            {"conf_threshold": 1.5},
            {"conf_threshold": True},
            {"apply_nms": "yes"},
            {"model_size": [640]},
            {"max_size": [0, 512]},
            {"ref_size": 1.5},
            {"max_workers": 0},
        ]
        for payload in bad_payloads:
            with self.subTest(payload=payload):
                with self.assertRaises(ValueError):
                    load_pipeline_config(self._write_config(payload))

    def test_not_an_object(self) -> None:
        with self.assertRaises(ValueError):
            load_pipeline_config(self._write_config([1, 2]))

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_pipeline_config(Path(tempfile.gettempdir()) / "does-not-exist-vision-kit.json")


if __name__ == "__main__":
    unittest.main()
