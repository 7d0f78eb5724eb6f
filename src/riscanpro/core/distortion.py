from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from riscanpro.core.frames import Cmcs

if TYPE_CHECKING:
    from riscanpro.calibration import CameraCalibration


def in_angle_extents(calibration: CameraCalibration, tan_horz: float, tan_vert: float) -> bool:
    # Both limits are inclusive.
    return (
        calibration.tan_min_horz <= tan_horz <= calibration.tan_max_horz
        and calibration.tan_min_vert <= tan_vert <= calibration.tan_max_vert
    )


def is_valid_pixel(calibration: CameraCalibration, u: float, v: float) -> bool:
    return 0.0 <= u < calibration.width and 0.0 <= v < calibration.height


def distort_pixel(point: Cmcs, calibration: CameraCalibration) -> tuple[float, float]:
    """
    Pinhole projection followed by the RiSCAN Pro OpenCV (version 2) distortion.

    The radius is angular, r = atan(|(x, y)|) on normalized coordinates. No
    visibility checks are made here; see `cmcs_to_ics`.
    """
    c = calibration
    u = c.fx * point.x / point.z + c.cx
    v = c.fy * point.y / point.z + c.cy
    nx = (u - c.cx) / c.fx
    ny = (v - c.cy) / c.fy
    r = math.atan(math.sqrt(nx * nx + ny * ny))
    r2 = r * r
    r4 = r2 * r2
    e = c.k1 * r2 + c.k2 * r4 + c.k3 * r4 * r2 + c.k4 * r4 * r4
    ud = u + nx * c.fx * e + 2.0 * c.fx * nx * ny * c.p1 + c.p2 * c.fx * (r2 + 2.0 * nx * nx)
    vd = v + ny * c.fy * e + 2.0 * c.fy * nx * ny * c.p2 + c.p1 * c.fy * (r2 + 2.0 * ny * ny)
    return ud, vd


def cmcs_to_ics(point: Cmcs, calibration: CameraCalibration) -> tuple[float, float] | None:
    """
    Map a camera-frame point to distorted sub-pixel coordinates (u, v).

    Returns None when the point is behind the camera, outside the angle
    extents, or lands outside [0, width) x [0, height).
    """
    if point.is_behind_camera():
        return None
    if not in_angle_extents(calibration, point.tan_horz(), point.tan_vert()):
        return None
    u, v = distort_pixel(point, calibration)
    if not is_valid_pixel(calibration, u, v):
        return None
    return u, v


def cmcs_to_ics_array(xyz_cmcs: np.ndarray, calibration: CameraCalibration) -> tuple[np.ndarray, np.ndarray]:
    """
    Vectorized `cmcs_to_ics` over camera-frame points (N,3).

    Returns (uv, valid): uv is (N,2) with NaN rows where valid is False.
    """
    c = calibration
    p = np.asarray(xyz_cmcs, dtype=np.float64).reshape(-1, 3)
    n = p.shape[0]
    uv = np.full((n, 2), np.nan, dtype=np.float64)
    valid = p[:, 2] > 0.0
    if not np.any(valid):
        return uv, valid

    x = p[valid, 0]
    y = p[valid, 1]
    z = p[valid, 2]
    tan_h = y / z
    tan_v = x / z
    fov = (tan_h >= c.tan_min_horz) & (tan_h <= c.tan_max_horz) & (tan_v >= c.tan_min_vert) & (tan_v <= c.tan_max_vert)

    u = c.fx * x / z + c.cx
    v = c.fy * y / z + c.cy
    nx = (u - c.cx) / c.fx
    ny = (v - c.cy) / c.fy
    r = np.arctan(np.sqrt(nx * nx + ny * ny))
    r2 = r * r
    r4 = r2 * r2
    e = c.k1 * r2 + c.k2 * r4 + c.k3 * r4 * r2 + c.k4 * r4 * r4
    ud = u + nx * c.fx * e + 2.0 * c.fx * nx * ny * c.p1 + c.p2 * c.fx * (r2 + 2.0 * nx * nx)
    vd = v + ny * c.fy * e + 2.0 * c.fy * nx * ny * c.p2 + c.p1 * c.fy * (r2 + 2.0 * ny * ny)
    inside = (ud >= 0.0) & (ud < c.width) & (vd >= 0.0) & (vd < c.height)

    ok = fov & inside
    idx = np.flatnonzero(valid)
    valid[idx[~ok]] = False
    uv[idx[ok], 0] = ud[ok]
    uv[idx[ok], 1] = vd[ok]
    return uv, valid
