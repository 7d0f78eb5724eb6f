from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

from riscanpro import element as el
from riscanpro.core.distortion import cmcs_to_ics, is_valid_pixel
from riscanpro.core.frames import Cmcs
from riscanpro.core.transform import Transform
from riscanpro.errors import InvalidCalibrationError, UnsupportedCameraCalibrationError

OPENCV_TAG = "camcalib_opencv"
OPENCV_VERSION = "2"
CAM_FILE_KEYS = ("fx", "fy", "cx", "cy", "k1", "k2", "k3", "k4", "p1", "p2", "nx", "ny", "dx", "dy")


@dataclass(frozen=True)
class OpenCvCameraCalibration:
    """
    Intrinsic OpenCV-style camera calibration (RiSCAN Pro "version 2").

    width/height are the sensor size in pixels (`intrinsic_opencv/nx`, `ny`);
    dx/dy are the pixel pitch.
    """

    name: str
    camera_model: str
    version: str
    fx: float
    fy: float
    cx: float
    cy: float
    k1: float
    k2: float
    k3: float
    k4: float
    p1: float
    p2: float
    tan_min_horz: float
    tan_max_horz: float
    tan_min_vert: float
    tan_max_vert: float
    width: int
    height: int
    dx: float = 0.0
    dy: float = 0.0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidCalibrationError(f"camera calibration {self.name!r}: width and height must be > 0")
        if self.fx == 0.0 or self.fy == 0.0:
            raise InvalidCalibrationError(f"camera calibration {self.name!r}: fx and fy must be non-zero")

    def cmcs_to_ics(self, point: Cmcs) -> tuple[float, float] | None:
        return cmcs_to_ics(point, self)

    def is_valid_pixel(self, u: float, v: float) -> bool:
        return is_valid_pixel(self, u, v)


# New camera models become new members of this union.
CameraCalibration: TypeAlias = OpenCvCameraCalibration


@dataclass(frozen=True)
class MountCalibration:
    name: str
    matrix: Transform


def camera_calibration_from_element(node: ET.Element) -> CameraCalibration:
    kind = node.tag
    version = node.findtext("version")
    version = version.strip() if version is not None else None
    if kind != OPENCV_TAG or version != OPENCV_VERSION:
        raise UnsupportedCameraCalibrationError(kind, version)
    return OpenCvCameraCalibration(
        name=el.text(node, "name"),
        camera_model=node.findtext("cameramodel", default="").strip(),
        version=version,
        fx=el.parse_float(node, "internal_opencv/fx"),
        fy=el.parse_float(node, "internal_opencv/fy"),
        cx=el.parse_float(node, "internal_opencv/cx"),
        cy=el.parse_float(node, "internal_opencv/cy"),
        k1=el.parse_float(node, "internal_opencv/k1"),
        k2=el.parse_float(node, "internal_opencv/k2"),
        k3=el.parse_float(node, "internal_opencv/k3"),
        k4=el.parse_float(node, "internal_opencv/k4"),
        p1=el.parse_float(node, "internal_opencv/p1"),
        p2=el.parse_float(node, "internal_opencv/p2"),
        tan_min_horz=el.parse_float(node, "angle_extents/tan_min_horz"),
        tan_max_horz=el.parse_float(node, "angle_extents/tan_max_horz"),
        tan_min_vert=el.parse_float(node, "angle_extents/tan_min_vert"),
        tan_max_vert=el.parse_float(node, "angle_extents/tan_max_vert"),
        width=el.parse_int(node, "intrinsic_opencv/nx"),
        height=el.parse_int(node, "intrinsic_opencv/ny"),
        dx=el.parse_float(node, "intrinsic_opencv/dx"),
        dy=el.parse_float(node, "intrinsic_opencv/dy"),
    )


def mount_calibration_from_element(node: ET.Element) -> MountCalibration:
    return MountCalibration(name=el.text(node, "name"), matrix=Transform(el.parse_matrix(node, "matrix")))


def camera_calibration_from_cam(path: str | Path) -> OpenCvCameraCalibration:
    """
    Read a standalone OpenCV camera file (`.cam`): one `key=value` line per
    parameter, keys case-insensitive. Lines that are not a numeric setting are
    ignored.

    A camera file carries no angle extents, so the calibration accepts every
    direction in front of the camera; the sensor bounds still apply.
    """
    p = Path(path)
    settings: dict[str, float] = {}
    for line in p.read_text(encoding="utf-8", errors="replace").splitlines():
        words = line.split("=")
        if len(words) != 2:
            continue
        try:
            settings[words[0].strip().lower()] = float(words[1])
        except ValueError:
            continue

    missing = [key for key in CAM_FILE_KEYS if key not in settings]
    if missing:
        raise InvalidCalibrationError(f"camera file {p}: missing settings {missing}")
    return OpenCvCameraCalibration(
        name=p.stem,
        camera_model="",
        version=OPENCV_VERSION,
        fx=settings["fx"],
        fy=settings["fy"],
        cx=settings["cx"],
        cy=settings["cy"],
        k1=settings["k1"],
        k2=settings["k2"],
        k3=settings["k3"],
        k4=settings["k4"],
        p1=settings["p1"],
        p2=settings["p2"],
        tan_min_horz=-math.inf,
        tan_max_horz=math.inf,
        tan_min_vert=-math.inf,
        tan_max_vert=math.inf,
        width=int(settings["nx"]),
        height=int(settings["ny"]),
        dx=settings["dx"],
        dy=settings["dy"],
    )
