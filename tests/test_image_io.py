"""Tests for Pillow-backed image loading and the command-line tool."""

import json

import numpy as np
import pytest

pytest.importorskip("PIL", reason="Pillow is required: pip install Pillow")
from PIL import Image

from pixelscan.cli import main
from pixelscan.image_io import are_paths_valid, is_path_valid, load_image, load_images
from pixelscan.pattern import Pattern

from conftest import INK, make_canvas, stamp


def _save(array, path, mode="RGBA"):
    img = Image.fromarray(array)
    if mode == "P":
        img = img.convert("RGB")
    img.convert(mode).save(path)
    return str(path)


class TestLoadImage:

    def test_rgba_png(self, tmp_path, crewmate_template):
        path = _save(crewmate_template, tmp_path / "t.png")
        arr = load_image(path)
        assert arr.shape == (4, 4, 4)
        assert arr.dtype == np.uint8
        np.testing.assert_array_equal(arr, crewmate_template)

    def test_rgb_png_becomes_opaque_rgba(self, tmp_path, crewmate_template):
        path = _save(crewmate_template, tmp_path / "t.png", mode="RGB")
        arr = load_image(path)
        assert arr.shape == (4, 4, 4)
        assert (arr[..., 3] == 255).all()

    def test_palette_png(self, tmp_path, crewmate_template, crewmate_coords):
        path = _save(crewmate_template, tmp_path / "t.png", mode="P")
        pattern = Pattern.from_template(load_image(path), INK, 0)
        assert len(pattern) == len(crewmate_coords)

    def test_load_images_skips_missing(self, tmp_path, crewmate_template):
        good = _save(crewmate_template, tmp_path / "a.png")
        with pytest.warns(UserWarning, match="Skipping"):
            images = load_images([good, str(tmp_path / "missing.png"), good])
        assert len(images) == 2

    def test_path_checks(self, tmp_path, crewmate_template):
        good = _save(crewmate_template, tmp_path / "a.png")
        assert is_path_valid(good)
        assert not is_path_valid(str(tmp_path / "nope.png"))
        assert are_paths_valid([good, good])
        assert not are_paths_valid([good, str(tmp_path / "nope.png")])


class TestPilInput:
    """PIL images can be passed straight to the core."""

    def test_from_template_accepts_pil_image(self, crewmate_template, crewmate_coords):
        img = Image.fromarray(crewmate_template)
        assert len(Pattern.from_template(img, INK, 0)) == len(crewmate_coords)

    def test_palette_mode_converted(self, crewmate_template, crewmate_coords):
        img = Image.fromarray(crewmate_template).convert("RGB").convert("P")
        assert len(Pattern.from_template(img, INK, 0)) == len(crewmate_coords)


class TestCli:

    @pytest.fixture
    def files(self, tmp_path, crewmate_template, crewmate_coords):
        canvas = make_canvas(24, 20)
        for ox, oy in [(1, 1), (12, 3), (6, 14)]:
            stamp(canvas, crewmate_coords, ox, oy)
        return (_save(crewmate_template, tmp_path / "template.png"),
                _save(canvas, tmp_path / "target.png"))

    def test_prints_count_and_time(self, files, capsys):
        assert main(list(files)) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "3"
        assert out[-1].startswith("Elapsed time:")

    def test_show_matches(self, files, capsys):
        assert main([*files, "--show-matches", "--workers", "1"]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[1:4] == ["1,1", "12,3", "6,14"]

    def test_color_and_tolerances(self, files, capsys):
        assert main([*files, "--color", "#000000", "--extract-tolerance", "0",
                     "--search-tolerance", "0"]) == 0
        assert capsys.readouterr().out.splitlines()[0] == "3"

    def test_config_file(self, files, tmp_path, capsys):
        config = tmp_path / "scan.json"
        config.write_text(json.dumps({"marker_color": [255, 0, 0], "extraction_tolerance": 0}))
        with pytest.warns(UserWarning, match="No pixel"):
            assert main([*files, "--config", str(config)]) == 0
        assert capsys.readouterr().out.splitlines()[0] == "0"

    def test_flags_override_config(self, files, tmp_path, capsys):
        config = tmp_path / "scan.json"
        config.write_text(json.dumps({"marker_color": [255, 0, 0]}))
        assert main([*files, "--config", str(config), "--color", "0,0,0"]) == 0
        assert capsys.readouterr().out.splitlines()[0] == "3"

    def test_verbose(self, files, capsys):
        assert main([*files, "-v"]) == 0
        assert "[scan]" in capsys.readouterr().err
