from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np


class RiscanError(ValueError):
    pass


class MissingElementError(RiscanError):
    def __init__(self, parent: str, child: str) -> None:
        self.parent = parent
        self.child = child
        super().__init__(f"element {child!r} is not a child of {parent!r}")


class MissingTextError(RiscanError):
    def __init__(self, element: str) -> None:
        self.element = element
        super().__init__(f"element {element!r} has no text")


class MissingNoderefError(RiscanError):
    def __init__(self, element: str) -> None:
        self.element = element
        super().__init__(f"element {element!r} has no noderef attribute")


class LiteralParseError(RiscanError):
    def __init__(self, path: str, text: str) -> None:
        self.path = path
        self.text = text
        super().__init__(f"cannot parse {path!r} as a number: {text!r}")


class MatrixParseError(RiscanError):
    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"cannot parse text as a 4x4 matrix: {text!r}")


class NonInvertibleMatrixError(RiscanError):
    def __init__(self, matrix: Any, label: str = "") -> None:
        self.matrix = np.array(matrix, dtype=np.float64)
        self.label = label
        what = f"{label} matrix" if label else "matrix"
        super().__init__(f"{what} is not invertible:\n{self.matrix}")


class UnsupportedCameraCalibrationError(RiscanError):
    def __init__(self, kind: str, version: str | None = None) -> None:
        self.kind = kind
        self.version = version
        super().__init__(f"unsupported camera calibration: {kind} (version {version})")


class MultipleCamerasError(RiscanError):
    def __init__(self, names: list[str]) -> None:
        self.names = list(names)
        super().__init__(f"expected a single camera calibration, found {len(self.names)}: {self.names}")


class InvalidCalibrationError(RiscanError):
    pass


class DuplicateNameError(RiscanError):
    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"duplicate {kind} name: {name!r}")


class MissingCameraCalibrationError(RiscanError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"camera calibration does not exist: {name!r}")


class MissingMountCalibrationError(RiscanError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"mount calibration does not exist: {name!r}")


class ProjectPathError(RiscanError):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"not a RiSCAN Pro project path: {self.path}")


class ScanPositionFromPathError(RiscanError):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"cannot deduce a scan position from path: {self.path}")


class ImageFromPathError(RiscanError):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"cannot deduce an image from path: {self.path}")


class InfratecFormatError(RiscanError):
    pass


class ImageNotInScanPositionError(RiscanError):
    def __init__(self, scan_position: str, image: str) -> None:
        self.scan_position = scan_position
        self.image = image
        super().__init__(f"image {image!r} does not belong to scan position {scan_position!r}")
