from __future__ import annotations

import io
import json
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from PIL import Image

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from figure_second import Document, cli

SAMPLE = TESTS_DIR / "data" / "three_layers.svg"


class _StdoutCapture:
    def __init__(self) -> None:
        self._text = io.StringIO()
        self.buffer = io.BytesIO()

    def write(self, value: str) -> int:
        return self._text.write(value)

    def flush(self) -> None:
        pass

    def get_text(self) -> str:
        return self._text.getvalue()


class CLIAcceptanceTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp = Path(self._tmp.name)

    def _png(self, name: str, size=(20, 10)) -> Path:
        path = self.tmp / name
        Image.new("RGB", size, (0, 128, 0)).save(path, format="PNG")
        return path

    def run_cli(self, argv: list[str]) -> tuple[int, str, bytes, str]:
        stdout = _StdoutCapture()
        stderr = io.StringIO()
        with mock.patch("sys.stdout", stdout), mock.patch("sys.stderr", stderr):
            code = cli.main(argv)
        return code, stdout.get_text(), stdout.buffer.getvalue(), stderr.getvalue()

    def test_requires_subcommand(self) -> None:
        code, _out, _svg, err = self.run_cli([])
        self.assertEqual(code, 2)
        self.assertIn("E_ARGS", err)
        self.assertIn("subcommand", err)

    def test_ids(self) -> None:
        code, out, _svg, err = self.run_cli(["ids", str(SAMPLE)])
        self.assertEqual(code, 0, err)
        self.assertEqual(out.splitlines(), ["rect286", "image356", "inner"])

    def test_dims(self) -> None:
        code, out, _svg, err = self.run_cli(["dims", str(SAMPLE), "inner"])
        self.assertEqual(code, 0, err)
        self.assertEqual(out.strip(), "10 20")

    def test_dims_missing_id(self) -> None:
        code, _out, _svg, err = self.run_cli(["dims", str(SAMPLE), "nope"])
        self.assertEqual(code, 3)
        self.assertIn("E_MISSING_ID", err)

    def test_json_errors_are_not_retryable(self) -> None:
        code, _out, _svg, err = self.run_cli(["--error-format", "json", "dims", str(SAMPLE), "nope"])
        self.assertEqual(code, 3)
        payload = json.loads(err)
        self.assertEqual(payload["code"], "E_MISSING_ID")
        self.assertIs(payload["retryable"], False)

        broken = self.tmp / "broken.svg"
        broken.write_bytes(b'<svg><g id="l"><rect/></g></svg>')
        code, _out, _svg, err = self.run_cli(["--error-format", "json", "ids", str(broken)])
        self.assertEqual(code, 2)
        payload = json.loads(err)
        self.assertEqual(payload["code"], "E_LAYER_ATTRIBUTE")
        self.assertIs(payload["retryable"], False)

    def test_missing_input_file(self) -> None:
        code, _out, _svg, err = self.run_cli(["ids", str(self.tmp / "absent.svg")])
        self.assertEqual(code, 4)
        self.assertIn("E_IO_READ", err)

    def test_list_layers(self) -> None:
        code, out, _svg, err = self.run_cli(["layers", str(SAMPLE)])
        self.assertEqual(code, 0, err)
        self.assertEqual(
            out.splitlines(),
            [
                "layer1\tLayer 1\tvisible",
                "layer2\tLayer 2\tvisible",
                "layer3\tLayer 3\thidden",
            ],
        )

    def test_toggle_layers_to_stdout(self) -> None:
        code, _out, svg, err = self.run_cli(
            ["layers", str(SAMPLE), "--show", "Layer 3", "--hide", "Layer 1"]
        )
        self.assertEqual(code, 0, err)
        doc = Document.parse(svg)
        self.assertTrue(doc.layer("Layer 1").hidden)
        self.assertFalse(doc.layer("Layer 3").hidden)

    def test_unknown_layer(self) -> None:
        code, _out, _svg, err = self.run_cli(
            ["--error-format", "json", "layers", str(SAMPLE), "--hide", "Layer 9"]
        )
        self.assertEqual(code, 3)
        payload = json.loads(err)
        self.assertFalse(payload["ok"])
        self.assertEqual(payload["code"], "E_MISSING_LAYER")

    def test_fill_writes_output_file(self) -> None:
        png = self._png("plot.png")
        target = self.tmp / "filled.svg"
        code, out, _svg, err = self.run_cli(
            ["fill", str(SAMPLE), "--image", f"rect286={png}", "-o", str(target)]
        )
        self.assertEqual(code, 0, err)
        self.assertIn("Wrote", out)

        filled = Document.from_path(target).find_by_id("rect286")
        self.assertEqual(filled.element.name, b"image")
        self.assertTrue(filled.element.get(b"xlink:href").startswith(b"data:image/png;base64,"))

    def test_fill_from_manifest(self) -> None:
        self._png("a.png")
        self._png("b.png")
        manifest = self.tmp / "images.json"
        manifest.write_text(json.dumps({"rect286": "a.png", "inner": "b.png"}))
        code, _out, svg, err = self.run_cli(["fill", str(SAMPLE), "--manifest", str(manifest)])
        self.assertEqual(code, 0, err)

        doc = Document.parse(svg)
        for id in ("rect286", "inner"):
            self.assertEqual(doc.find_by_id(id).element.name, b"image")

    def test_fill_rejects_non_png(self) -> None:
        jpg = self.tmp / "plot.jpg"
        Image.new("RGB", (4, 4)).save(jpg, format="JPEG")
        code, _out, _svg, err = self.run_cli(["fill", str(SAMPLE), "--image", f"rect286={jpg}"])
        self.assertEqual(code, 4)
        self.assertIn("E_IMAGE_FORMAT", err)

    def test_fill_bad_image_argument(self) -> None:
        code, _out, _svg, err = self.run_cli(["fill", str(SAMPLE), "--image", "rect286"])
        self.assertEqual(code, 2)
        self.assertIn("E_ARGS", err)

    def test_fill_requires_images(self) -> None:
        code, _out, _svg, err = self.run_cli(["fill", str(SAMPLE)])
        self.assertEqual(code, 2)
        self.assertIn("no images", err)

    def test_parse_error_is_reported(self) -> None:
        broken = self.tmp / "broken.svg"
        broken.write_bytes(b'<svg><g id="layer1" inkscape:label="bg"><rect id="a" width="1" height="1"/>')
        code, _out, _svg, err = self.run_cli(["ids", str(broken)])
        self.assertEqual(code, 2)
        self.assertIn("E_LAYER_UNTERMINATED", err)
        self.assertIn("bg", err)


if __name__ == "__main__":
    unittest.main()
