from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

import numpy as np

from riscanpro.calibration import CameraCalibration, MountCalibration
from riscanpro.core.distortion import cmcs_to_ics, cmcs_to_ics_array
from riscanpro.core.frames import Cmcs, Prcs, Socs, socs_to_cmcs_transform
from riscanpro.core.image_io import PixelMatrix, load_pixel_matrix
from riscanpro.core.transform import Transform
from riscanpro.errors import ImageNotInScanPositionError
from riscanpro.project import Image, Project, ScanPosition, load_project

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Colorizer:
    """
    Samples one scan position image for 3-D points.

    Points outside the image view give None (NaN in the array form); that is
    the usual outcome for most points of a scan, not an error.
    """

    camera_calibration: CameraCalibration
    mount_calibration: MountCalibration
    scan_position: ScanPosition
    image: Image
    pixels: PixelMatrix
    socs_to_cmcs_matrix: Transform = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.scan_position.image(self.image.name) is not self.image:
            raise ImageNotInScanPositionError(self.scan_position.name, self.image.name)
        object.__setattr__(
            self,
            "socs_to_cmcs_matrix",
            socs_to_cmcs_transform(self.image.cop, self.mount_calibration.matrix),
        )

    @classmethod
    def from_project(
        cls,
        project: Project,
        scan_position: ScanPosition,
        image: Image,
        pixels: PixelMatrix,
    ) -> "Colorizer":
        return cls(
            camera_calibration=project.camera_calibration_for(image),
            mount_calibration=project.mount_calibration_for(image),
            scan_position=scan_position,
            image=image,
            pixels=pixels,
        )

    @classmethod
    def from_path(cls, path: str | Path, project: Project | None = None) -> "Colorizer":
        """
        Build a colorizer for an image file stored inside a project, e.g.
        `project.RiSCAN/SCANS/SP01/SCANPOSIMAGES/SP01 - Image001.csv`.
        """
        if project is None:
            project = load_project(path)
        scan_position, image = project.image_from_path(path)
        pixels = load_pixel_matrix(path)
        logger.info("Colorizing from %s / %s (%dx%d)", scan_position.name, image.name, pixels.width, pixels.height)
        return cls.from_project(project, scan_position, image, pixels)

    def socs_to_cmcs(self, point: Socs) -> Cmcs:
        return Cmcs.from_array(self.socs_to_cmcs_matrix.apply(point.as_array()))

    def pixel(self, point: Socs) -> tuple[float, float] | None:
        return cmcs_to_ics(self.socs_to_cmcs(point), self.camera_calibration)

    def colorize(self, point: Socs) -> float | None:
        uv = self.pixel(point)
        if uv is None:
            return None
        return self.pixels.get(*uv)

    def colorize_prcs(self, point: Prcs) -> float | None:
        return self.colorize(self.scan_position.prcs_to_socs(point))

    def colorize_array(self, xyz_socs: np.ndarray) -> np.ndarray:
        """
        Colorize SOCS points (N,3). Returns (N,) values with NaN for no value.
        """
        xyz_cmcs = self.socs_to_cmcs_matrix.apply(np.asarray(xyz_socs, dtype=np.float64).reshape(-1, 3))
        uv, valid = cmcs_to_ics_array(xyz_cmcs, self.camera_calibration)
        logger.debug("%d of %d points project into %s", int(np.count_nonzero(valid)), valid.size, self.image.name)
        return self.pixels.sample(uv)


@dataclass(frozen=True, eq=False)
class ScanPositionColorizer:
    """
    Colorizes points from every image of a scan position that has pixel data.

    Images are tried in project order; the first one that gives a value wins.
    Images without an entry in the pixel mapping are skipped.
    """

    scan_position: ScanPosition
    colorizers: tuple[Colorizer, ...]

    @classmethod
    def from_project(
        cls,
        project: Project,
        scan_position: ScanPosition,
        pixels: Mapping[str, PixelMatrix],
    ) -> "ScanPositionColorizer":
        for name in pixels:
            if scan_position.image(name) is None:
                raise ImageNotInScanPositionError(scan_position.name, name)
        colorizers = tuple(
            Colorizer.from_project(project, scan_position, image, pixels[name])
            for name, image in scan_position.images.items()
            if name in pixels
        )
        logger.info("Colorizing from %s with %d of %d images", scan_position.name, len(colorizers), len(scan_position.images))
        return cls(scan_position=scan_position, colorizers=colorizers)

    def colorize(self, point: Socs) -> float | None:
        for colorizer in self.colorizers:
            value = colorizer.colorize(point)
            if value is not None:
                return value
        return None

    def colorize_prcs(self, point: Prcs) -> float | None:
        return self.colorize(self.scan_position.prcs_to_socs(point))

    def colorize_array(self, xyz_socs: np.ndarray) -> np.ndarray:
        xyz = np.asarray(xyz_socs, dtype=np.float64).reshape(-1, 3)
        out = np.full(xyz.shape[0], np.nan, dtype=np.float64)
        for colorizer in self.colorizers:
            todo = np.isnan(out)
            if not np.any(todo):
                break
            out[todo] = colorizer.colorize_array(xyz[todo])
        return out
