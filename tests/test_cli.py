"""
Tests for the annotate_images command-line script.
"""

import json

import pytest

from scripts.annotate_images import main


@pytest.fixture
def image_file(tmp_path, png_bytes):
    path = tmp_path / "photo.png"
    path.write_bytes(png_bytes)
    return path


class TestAnnotateImages:
    """Tests for the script entry point."""

    def test_writes_bundle_and_png(self, tmp_path, image_file, capsys):
        out = tmp_path / "out"

        main([str(image_file), "-o", str(out)])

        bundles = list(out.glob("annotations-*.json"))
        assert len(bundles) == 1
        data = json.loads(bundles[0].read_text())
        assert data[0]["imageName"] == "photo.png"
        assert (out / "photo_annotated.png").exists()
        assert "(1 image(s), 16 nodes)" in capsys.readouterr().out

    def test_missing_file_is_reported(self, tmp_path, image_file, capsys):
        missing = tmp_path / "missing.png"
        out = tmp_path / "out"

        main([str(missing), str(image_file), "-o", str(out), "--no-png"])

        output = capsys.readouterr().out
        assert f"✗ {missing}" in output
        data = json.loads(next(out.glob("annotations-*.json")).read_text())
        assert [d["imageName"] for d in data] == ["photo.png"]

    def test_undecodable_file_is_reported(self, tmp_path, image_file, capsys):
        junk = tmp_path / "junk.png"
        junk.write_bytes(b"not an image")

        main([str(junk), str(image_file), "-o", str(tmp_path / "out"), "--no-png"])

        assert f"✗ {junk}" in capsys.readouterr().out

    @pytest.mark.parametrize("option", ["--vertices", "--max-images"])
    def test_invalid_counts_rejected(self, tmp_path, image_file, option):
        with pytest.raises(SystemExit) as exc:
            main([str(image_file), "-o", str(tmp_path / "out"), option, "0"])

        assert exc.value.code == 2

    def test_nothing_loaded_fails(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main([str(tmp_path / "missing.png"), "-o", str(tmp_path / "out")])

        assert exc.value.code == 1
        assert "✗ Export failed" in capsys.readouterr().out
