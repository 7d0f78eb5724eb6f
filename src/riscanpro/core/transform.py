from __future__ import annotations

import numpy as np

from riscanpro.errors import MatrixParseError, NonInvertibleMatrixError


def parse_matrix4(text: str) -> np.ndarray:
    """
    Parse 16 whitespace-separated numbers into a 4x4 matrix.

    RiSCAN Pro writes matrices row by row, so the first four numbers are the
    first row and the translation sits in the last column.
    """
    tokens = text.split()
    if len(tokens) != 16:
        raise MatrixParseError(text)
    try:
        values = [float(t) for t in tokens]
    except ValueError as e:
        raise MatrixParseError(text) from e
    return np.asarray(values, dtype=np.float64).reshape(4, 4)


def format_matrix4(matrix: np.ndarray) -> str:
    m = np.asarray(matrix, dtype=np.float64).reshape(4, 4)
    return "\n".join(" ".join(repr(float(x)) for x in row) for row in m)


class Transform:
    """
    Homogeneous 4x4 projective transform.

    The wrapped array is read-only. Compose with `@`; apply to points with
    `apply()`, which divides by the homogeneous coordinate.
    """

    __slots__ = ("_m",)

    def __init__(self, matrix: np.ndarray) -> None:
        m = np.array(matrix, dtype=np.float64)
        if m.shape != (4, 4):
            raise MatrixParseError(str(matrix))
        m.setflags(write=False)
        self._m = m

    @classmethod
    def identity(cls) -> "Transform":
        return cls(np.eye(4, dtype=np.float64))

    @classmethod
    def from_text(cls, text: str) -> "Transform":
        return cls(parse_matrix4(text))

    @classmethod
    def from_translation(cls, x: float, y: float, z: float) -> "Transform":
        m = np.eye(4, dtype=np.float64)
        m[:3, 3] = (x, y, z)
        return cls(m)

    @property
    def matrix(self) -> np.ndarray:
        return self._m

    def to_text(self) -> str:
        return format_matrix4(self._m)

    def tolist(self) -> list[list[float]]:
        return self._m.tolist()

    def inverse(self, label: str = "") -> "Transform":
        try:
            inv = np.linalg.inv(self._m)
        except np.linalg.LinAlgError as e:
            raise NonInvertibleMatrixError(self._m, label) from e
        if not np.all(np.isfinite(inv)):
            raise NonInvertibleMatrixError(self._m, label)
        return Transform(inv)

    def apply(self, xyz: np.ndarray) -> np.ndarray:
        """
        Apply to a point (3,) or a batch of points (N,3).
        """
        p = np.asarray(xyz, dtype=np.float64)
        single = p.ndim == 1
        p = p.reshape(-1, 3)
        h = np.concatenate([p, np.ones((p.shape[0], 1), dtype=np.float64)], axis=1)
        out = h @ self._m.T
        out = out[:, :3] / out[:, 3:4]
        return out[0] if single else out

    def __matmul__(self, other: "Transform") -> "Transform":
        if not isinstance(other, Transform):
            return NotImplemented
        return Transform(self._m @ other._m)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transform):
            return NotImplemented
        return bool(np.array_equal(self._m, other._m))

    __hash__ = None  # type: ignore[assignment]

    def allclose(self, other: "Transform", atol: float = 1e-9) -> bool:
        return bool(np.allclose(self._m, other._m, rtol=0.0, atol=atol))

    def __repr__(self) -> str:
        return f"Transform({self._m.tolist()!r})"
