from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from riscanpro.core.image_io import PixelMatrix, load_pixel_matrix


def _write_gray(path: Path, arr: np.ndarray) -> None:
    Image.fromarray(arr.astype(np.uint8)).save(path)


def test_load_pixel_matrix_png(tmp_path: Path) -> None:
    arr = (np.arange(48, dtype=np.uint8).reshape(6, 8) * 4) % 255
    p = tmp_path / "SP01 - Image001.png"
    _write_gray(p, arr)

    m = load_pixel_matrix(p)
    assert (m.width, m.height) == (8, 6)
    assert m.data.dtype == np.float64
    assert np.array_equal(m.data, arr.astype(np.float64))


def test_load_pixel_matrix_rgb_is_gray(tmp_path: Path) -> None:
    rgb = np.zeros((4, 5, 3), dtype=np.uint8)
    rgb[..., :] = 100
    p = tmp_path / "rgb.png"
    Image.fromarray(rgb).save(p)
    m = load_pixel_matrix(p)
    assert m.data.shape == (4, 5)
    assert np.allclose(m.data, 100.0, atol=1.0)


def test_load_pixel_matrix_csv(tmp_path: Path) -> None:
    p = tmp_path / "thermal.csv"
    p.write_text("[Settings]\nImageWidth=2\nImageHeight=1\n[Data]\n20.5;21.5\n", encoding="utf-8")
    m = load_pixel_matrix(p)
    assert m.get(1.7, 0.3) == 21.5


def test_pixel_matrix_get_and_sample() -> None:
    m = PixelMatrix(np.arange(6, dtype=np.float64).reshape(2, 3))
    assert m.get(2.99, 1.0) == 5.0
    assert m.get(3.0, 0.0) is None
    assert m.get(-0.1, 0.0) is None
    out = m.sample(np.array([[0.5, 0.5], [2.5, 1.5], [3.0, 0.0], [np.nan, 0.0]]))
    assert out[0] == 0.0
    assert out[1] == 5.0
    assert np.isnan(out[2]) and np.isnan(out[3])
