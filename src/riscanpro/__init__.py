from riscanpro.calibration import CameraCalibration, MountCalibration, OpenCvCameraCalibration
from riscanpro.colorizer import Colorizer, ScanPositionColorizer
from riscanpro.core.distortion import cmcs_to_ics
from riscanpro.core.frames import Cmcs, Glcs, Prcs, Socs
from riscanpro.core.transform import Transform
from riscanpro.errors import RiscanError
from riscanpro.project import Image, Project, ScanPosition, load_project, parse_project

__all__ = [
    "CameraCalibration",
    "Cmcs",
    "Colorizer",
    "ScanPositionColorizer",
    "Glcs",
    "Image",
    "MountCalibration",
    "OpenCvCameraCalibration",
    "Prcs",
    "Project",
    "RiscanError",
    "ScanPosition",
    "Socs",
    "Transform",
    "cmcs_to_ics",
    "load_project",
    "parse_project",
]
