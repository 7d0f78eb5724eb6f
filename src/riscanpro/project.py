from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from riscanpro import element as el
from riscanpro.calibration import (
    CameraCalibration,
    MountCalibration,
    camera_calibration_from_element,
    mount_calibration_from_element,
)
from riscanpro.core.frames import Glcs, Prcs, Socs
from riscanpro.core.transform import Transform
from riscanpro.errors import (
    DuplicateNameError,
    ImageFromPathError,
    MissingCameraCalibrationError,
    MissingMountCalibrationError,
    MultipleCamerasError,
    ProjectPathError,
    ScanPositionFromPathError,
)

logger = logging.getLogger(__name__)

PROJECT_RSP = "project.rsp"
PROJECT_SUFFIX = ".RiSCAN"
IMAGE_NAME_SEPARATOR = " - "


@dataclass(frozen=True)
class Image:
    """A scan position image: the camera pose (COP) and its calibration names."""

    name: str
    cop: Transform
    camera_calibration_name: str
    mount_calibration_name: str


@dataclass(frozen=True)
class ScanPosition:
    name: str
    sop: Transform
    images: Mapping[str, Image] = field(default_factory=lambda: MappingProxyType({}))
    scans: tuple[str, ...] = ()

    def image(self, name: str) -> Image | None:
        return self.images.get(name)

    def contains_scan(self, name: str) -> bool:
        return name in self.scans

    def socs_to_prcs(self, point: Socs) -> Prcs:
        return point.to_prcs(self.sop)

    def prcs_to_socs(self, point: Prcs) -> Socs:
        return point.to_socs(self.sop)


@dataclass(frozen=True)
class Project:
    """
    Calibration registry of a RiSCAN Pro project.

    Built once by `load_project` / `parse_project`; every image's calibration
    names are guaranteed to resolve.
    """

    pop: Transform
    camera_calibrations: Mapping[str, CameraCalibration]
    mount_calibrations: Mapping[str, MountCalibration]
    scan_positions: Mapping[str, ScanPosition]
    path: Path | None = field(default=None, compare=False)

    def scan_position(self, name: str) -> ScanPosition | None:
        return self.scan_positions.get(name)

    def image(self, scan_position: str, image: str) -> Image | None:
        sp = self.scan_position(scan_position)
        return sp.image(image) if sp is not None else None

    def scan_position_with_scan(self, scan_name: str) -> ScanPosition | None:
        for sp in self.scan_positions.values():
            if sp.contains_scan(scan_name):
                return sp
        return None

    def camera_calibration(self) -> CameraCalibration:
        if len(self.camera_calibrations) != 1:
            raise MultipleCamerasError(list(self.camera_calibrations))
        return next(iter(self.camera_calibrations.values()))

    def camera_calibration_for(self, image: Image) -> CameraCalibration:
        try:
            return self.camera_calibrations[image.camera_calibration_name]
        except KeyError as e:
            raise MissingCameraCalibrationError(image.camera_calibration_name) from e

    def mount_calibration_for(self, image: Image) -> MountCalibration:
        try:
            return self.mount_calibrations[image.mount_calibration_name]
        except KeyError as e:
            raise MissingMountCalibrationError(image.mount_calibration_name) from e

    def prcs_to_glcs(self, point: Prcs) -> Glcs:
        return point.to_glcs(self.pop)

    def glcs_to_prcs(self, point: Glcs) -> Prcs:
        return point.to_prcs(self.pop)

    def scan_position_from_path(self, path: str | Path) -> ScanPosition:
        """
        Deduce the scan position that owns a file from its path.

        Tried in order: the parent directory name, the first " - " separated
        part of the file stem, then any scan position holding an image named
        like the stem.
        """
        p = Path(path)
        sp = self.scan_positions.get(p.parent.name)
        if sp is not None:
            return sp
        stem = p.stem
        sp = self.scan_positions.get(stem.split(IMAGE_NAME_SEPARATOR)[0])
        if sp is not None:
            return sp
        for sp in self.scan_positions.values():
            if stem in sp.images:
                return sp
        raise ScanPositionFromPathError(p)

    def image_from_path(self, path: str | Path) -> tuple[ScanPosition, Image]:
        p = Path(path)
        try:
            sp = self.scan_position_from_path(p)
        except ScanPositionFromPathError as e:
            raise ImageFromPathError(p) from e
        image = sp.image(p.stem)
        if image is None:
            raise ImageFromPathError(p)
        return sp, image


def project_rsp_path(path: str | Path) -> Path:
    """
    Return the `project.rsp` path for a project directory, an rsp file, or any
    path inside a `*.RiSCAN` directory.
    """
    p = Path(path).resolve()
    if p.suffix == ".rsp" and p.is_file():
        return p
    for candidate in (p, *p.parents):
        if candidate.suffix == PROJECT_SUFFIX and candidate.is_dir():
            rsp = candidate / PROJECT_RSP
            if rsp.is_file():
                return rsp
            break
    raise ProjectPathError(path)


def load_project(path: str | Path, *, single_camera: bool = False) -> Project:
    rsp = project_rsp_path(path)
    root = ET.parse(rsp).getroot()
    project = parse_project(root, path=rsp, single_camera=single_camera)
    logger.info(
        "Loaded %s: %d scan positions, %d camera calibrations, %d mount calibrations",
        rsp,
        len(project.scan_positions),
        len(project.camera_calibrations),
        len(project.mount_calibrations),
    )
    return project


def parse_project(root: ET.Element, *, path: Path | None = None, single_camera: bool = False) -> Project:
    pop = Transform(el.parse_matrix(root, "pop/matrix"))

    # Calibrations are collected first: images may reference them from
    # anywhere in the document.
    mount_calibrations: dict[str, MountCalibration] = {}
    for node in el.children(root, "calibrations/mountcalibs/mountcalib"):
        mc = mount_calibration_from_element(node)
        _insert_unique(mount_calibrations, mc.name, mc, "mount calibration")

    camera_calibrations: dict[str, CameraCalibration] = {}
    for node in el.children(root, "calibrations/camcalibs/*"):
        cc = camera_calibration_from_element(node)
        _insert_unique(camera_calibrations, cc.name, cc, "camera calibration")
    if single_camera and len(camera_calibrations) > 1:
        raise MultipleCamerasError(list(camera_calibrations))

    scan_positions: dict[str, ScanPosition] = {}
    for node in el.children(root, "scanpositions/scanposition"):
        sp = _scan_position_from_element(node, camera_calibrations, mount_calibrations)
        _insert_unique(scan_positions, sp.name, sp, "scan position")
        logger.debug("Scan position %s: %d images, %d scans", sp.name, len(sp.images), len(sp.scans))

    return Project(
        pop=pop,
        camera_calibrations=MappingProxyType(camera_calibrations),
        mount_calibrations=MappingProxyType(mount_calibrations),
        scan_positions=MappingProxyType(scan_positions),
        path=path,
    )


def _scan_position_from_element(
    node: ET.Element,
    camera_calibrations: dict[str, CameraCalibration],
    mount_calibrations: dict[str, MountCalibration],
) -> ScanPosition:
    name = el.text(node, "name")
    sop = Transform(el.parse_matrix(node, "sop/matrix"))
    scans = tuple(el.text(s, "name") for s in el.children(node, "singlescans/scan", required=False))

    images: dict[str, Image] = {}
    for img_node in el.children(node, "scanposimages/scanposimage", required=False):
        camera_name = el.noderef(img_node, "camcalib_ref")
        if camera_name not in camera_calibrations:
            raise MissingCameraCalibrationError(camera_name)
        mount_name = el.noderef(img_node, "mountcalib_ref")
        if mount_name not in mount_calibrations:
            raise MissingMountCalibrationError(mount_name)
        image = Image(
            name=el.text(img_node, "name"),
            cop=Transform(el.parse_matrix(img_node, "cop/matrix")),
            camera_calibration_name=camera_name,
            mount_calibration_name=mount_name,
        )
        _insert_unique(images, image.name, image, f"image in scan position {name}")
    return ScanPosition(name=name, sop=sop, images=MappingProxyType(images), scans=scans)


def _insert_unique(d: dict, key: str, value, kind: str) -> None:
    if key in d:
        raise DuplicateNameError(kind, key)
    d[key] = value
