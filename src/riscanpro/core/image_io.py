from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image


@dataclass(frozen=True, eq=False)
class PixelMatrix:
    """
    A 2-D image sampled by pixel index. `data` is indexed [row=v, col=u].
    """

    data: np.ndarray

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    def get(self, u: float, v: float) -> float | None:
        if not (0.0 <= u < self.width and 0.0 <= v < self.height):
            return None
        return float(self.data[math.floor(v), math.floor(u)])

    def sample(self, uv: np.ndarray) -> np.ndarray:
        """Vectorized `get` on (N,2) pixel coordinates; NaN where not sampleable."""
        uv = np.asarray(uv, dtype=np.float64).reshape(-1, 2)
        out = np.full((uv.shape[0],), np.nan, dtype=np.float64)
        u = uv[:, 0]
        v = uv[:, 1]
        ok = np.isfinite(u) & np.isfinite(v) & (u >= 0.0) & (u < self.width) & (v >= 0.0) & (v < self.height)
        out[ok] = self.data[np.floor(v[ok]).astype(np.intp), np.floor(u[ok]).astype(np.intp)]
        return out


def load_pixel_matrix(path: str | Path) -> PixelMatrix:
    """
    Load a single-channel image as a float64 PixelMatrix.

    Infratec text exports (.csv) go through `read_infratec`. Raster formats
    use OpenCV when installed, Pillow otherwise. Colour images are converted
    to grayscale.
    """
    p = Path(path)
    if p.suffix.lower() == ".csv":
        from riscanpro.core.infratec import read_infratec

        return read_infratec(p).pixels
    return PixelMatrix(_load_raster(p))


def _load_raster(p: Path) -> np.ndarray:
    try:
        import cv2  # type: ignore
    except ImportError:
        cv2 = None

    if cv2 is not None:
        img = cv2.imread(str(p), cv2.IMREAD_ANYDEPTH | cv2.IMREAD_ANYCOLOR)
        if img is not None:
            if img.ndim == 3:
                img = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
            return np.asarray(img, dtype=np.float64)

    with Image.open(p) as im:
        if im.mode not in ("L", "I", "I;16", "F"):
            im = im.convert("L")
        arr = np.asarray(im, dtype=np.float64)
    return arr
