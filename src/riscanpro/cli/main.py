from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np

from riscanpro.api.project_io import project_to_json
from riscanpro.colorizer import Colorizer
from riscanpro.project import load_project


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="riscanpro")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    js = sub.add_parser("json", help="Print a RiSCAN Pro project as JSON.")
    js.add_argument("project", type=Path, help="Project directory (*.RiSCAN) or project.rsp.")
    js.add_argument("--compact", action="store_true", help="Single-line JSON.")
    js.add_argument("--single-camera", action="store_true", help="Reject projects with more than one camera calibration.")

    col = sub.add_parser(
        "colorize",
        help="Sample a scan position image (e.g. an Infratec .csv) for SOCS points.",
    )
    col.add_argument("image", type=Path, help="Image file inside the project, e.g. SCANS/SP01/SCANPOSIMAGES/SP01 - Image001.csv")
    col.add_argument("--points", type=Path, required=True, help="Text file with one 'x y z' SOCS point per line.")
    col.add_argument("--out", type=Path, required=True, help="Output text file with 'x y z value' rows (nan = no value).")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "json":
        project = load_project(args.project, single_camera=args.single_camera)
        print(project_to_json(project, compact=args.compact))
        return 0

    if args.cmd == "colorize":
        xyz = np.loadtxt(args.points, dtype=np.float64, ndmin=2)[:, :3]
        if xyz.shape[1] != 3:
            parser.error(f"{args.points}: expected 'x y z' rows, found {xyz.shape[1]} columns")
        colorizer = Colorizer.from_path(args.image)
        values = colorizer.colorize_array(xyz)
        args.out.parent.mkdir(parents=True, exist_ok=True)
        np.savetxt(args.out, np.column_stack([xyz, values]), fmt="%.6f")
        print(f"Wrote {args.out} ({int(np.count_nonzero(np.isfinite(values)))}/{values.size} points colorized)")
        return 0

    raise AssertionError(f"Unhandled cmd: {args.cmd}")
