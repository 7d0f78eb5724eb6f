from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from riscanpro.project import Project


def project_to_dict(project: Project) -> dict[str, Any]:
    """
    Plain JSON-friendly view of a project. Matrices are 4x4 nested lists,
    row-major as in the project file.
    """
    return {
        "path": str(project.path) if project.path is not None else None,
        "pop": project.pop.tolist(),
        "camera_calibrations": {name: asdict(cc) for name, cc in project.camera_calibrations.items()},
        "mount_calibrations": {
            name: {"name": mc.name, "matrix": mc.matrix.tolist()} for name, mc in project.mount_calibrations.items()
        },
        "scan_positions": {
            name: {
                "name": sp.name,
                "sop": sp.sop.tolist(),
                "scans": list(sp.scans),
                "images": {
                    image_name: {
                        "name": image.name,
                        "cop": image.cop.tolist(),
                        "camera_calibration_name": image.camera_calibration_name,
                        "mount_calibration_name": image.mount_calibration_name,
                    }
                    for image_name, image in sp.images.items()
                },
            }
            for name, sp in project.scan_positions.items()
        },
    }


def project_to_json(project: Project, *, compact: bool = False) -> str:
    if compact:
        return json.dumps(project_to_dict(project), separators=(",", ":"))
    return json.dumps(project_to_dict(project), indent=2)


def save_project_json(path: Path, project: Project, *, compact: bool = False) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(project_to_json(project, compact=compact), encoding="utf-8")
    return path
