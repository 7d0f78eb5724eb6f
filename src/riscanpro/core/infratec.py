"""
Reader for Infratec thermal camera text exports.

The export is a `[Settings]` block of `Key=Value` lines followed by a `[Data]`
block with one image row per line, values separated by ";".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from riscanpro.core.image_io import PixelMatrix
from riscanpro.errors import InfratecFormatError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class InfratecImage:
    path: Path
    version: int
    pixels: PixelMatrix

    @property
    def width(self) -> int:
        return self.pixels.width

    @property
    def height(self) -> int:
        return self.pixels.height

    def temperature(self, u: float, v: float) -> float | None:
        return self.pixels.get(u, v)


def read_infratec(path: str | Path) -> InfratecImage:
    p = Path(path)
    # Headers carry a degree sign in a legacy code page.
    text = p.read_bytes().decode("utf-8", errors="replace")
    return parse_infratec(text, path=p)


def parse_infratec(text: str, *, path: Path | None = None) -> InfratecImage:
    lines = text.splitlines()
    if not lines or lines[0].strip() != "[Settings]":
        first = lines[0] if lines else ""
        raise InfratecFormatError(f"invalid first line: {first!r}")

    settings: dict[str, str] = {}
    data_start = None
    for i, line in enumerate(lines[1:], start=1):
        line = line.strip()
        if line == "[Data]":
            data_start = i + 1
            break
        if not line:
            continue
        key, sep, value = line.partition("=")
        if not sep:
            raise InfratecFormatError(f"invalid header line: {line!r}")
        settings[key.strip()] = value.strip()
    if data_start is None:
        raise InfratecFormatError("unexpected end of file before [Data]")

    try:
        width = int(settings["ImageWidth"])
        height = int(settings["ImageHeight"])
        version = int(settings.get("Version", "0"))
    except KeyError as e:
        raise InfratecFormatError(f"missing header setting: {e.args[0]}") from e
    except ValueError as e:
        raise InfratecFormatError(f"invalid header value: {e}") from e

    rows: list[list[float]] = []
    for line in lines[data_start:]:
        if not line.strip():
            continue
        try:
            rows.append([float(s) for s in line.split(";") if s.strip()])
        except ValueError as e:
            raise InfratecFormatError(f"invalid data line: {line!r}") from e

    if len(rows) != height:
        raise InfratecFormatError(f"expected {height} data rows, found {len(rows)}")
    for r, row in enumerate(rows):
        if len(row) != width:
            raise InfratecFormatError(f"row {r}: expected {width} values, found {len(row)}")

    logger.debug("Read Infratec image %s (%dx%d, version %d)", path, width, height, version)
    data = np.asarray(rows, dtype=np.float64).reshape(height, width)
    return InfratecImage(path=path if path is not None else Path(), version=version, pixels=PixelMatrix(data))
