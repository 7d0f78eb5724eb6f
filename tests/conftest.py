from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Callable

import pytest

IDENTITY = "1 0 0 0 0 1 0 0 0 0 1 0 0 0 0 1"


def _camcalib(
    name: str = "Infratec",
    *,
    tag: str = "camcalib_opencv",
    version: str = "2",
    fx: float = 10.0,
    fy: float = 10.0,
    cx: float = 4.0,
    cy: float = 3.0,
    k: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0),
    p: tuple[float, float] = (0.0, 0.0),
    tan_limit: float = 1.0,
    width: int = 8,
    height: int = 6,
) -> str:
    return f"""
      <{tag}>
        <name>{name}</name>
        <cameramodel>Infratec VarioCAM HD</cameramodel>
        <version>{version}</version>
        <angle_extents>
          <tan_max_horz>{tan_limit}</tan_max_horz>
          <tan_max_vert>{tan_limit}</tan_max_vert>
          <tan_min_horz>{-tan_limit}</tan_min_horz>
          <tan_min_vert>{-tan_limit}</tan_min_vert>
        </angle_extents>
        <internal_opencv>
          <cx>{cx}</cx><cy>{cy}</cy><fx>{fx}</fx><fy>{fy}</fy>
          <k1>{k[0]}</k1><k2>{k[1]}</k2><k3>{k[2]}</k3><k4>{k[3]}</k4>
          <p1>{p[0]}</p1><p2>{p[1]}</p2>
        </internal_opencv>
        <intrinsic_opencv>
          <dx>0.000017</dx><dy>0.000017</dy><nx>{width}</nx><ny>{height}</ny>
        </intrinsic_opencv>
      </{tag}>"""


def _mountcalib(name: str = "Mount", matrix: str = IDENTITY) -> str:
    return f"""
      <mountcalib>
        <name>{name}</name>
        <matrix>{matrix}</matrix>
      </mountcalib>"""


def _image(name: str, *, cop: str = IDENTITY, camcalib: str = "Infratec", mountcalib: str = "Mount") -> str:
    return f"""
        <scanposimage>
          <name>{name}</name>
          <file>{name}.csv</file>
          <cop><matrix>{cop}</matrix></cop>
          <camcalib_ref noderef="calibrations/camcalibs/{camcalib}"/>
          <mountcalib_ref noderef="calibrations/mountcalibs/{mountcalib}"/>
        </scanposimage>"""


def _scanposition(name: str, *, sop: str = IDENTITY, images: tuple[str, ...] = (), scans: tuple[str, ...] = ()) -> str:
    scans_xml = "".join(f"<scan><name>{s}</name></scan>" for s in scans)
    return f"""
    <scanposition>
      <name>{name}</name>
      <sop><matrix>{sop}</matrix></sop>
      <singlescans>{scans_xml}</singlescans>
      <scanposimages>{''.join(images)}</scanposimages>
    </scanposition>"""


def _project(
    *,
    pop: str = IDENTITY,
    camcalibs: tuple[str, ...] | None = None,
    mountcalibs: tuple[str, ...] | None = None,
    scanpositions: tuple[str, ...] | None = None,
    calibrations_first: bool = True,
) -> str:
    if camcalibs is None:
        camcalibs = (_camcalib(),)
    if mountcalibs is None:
        mountcalibs = (_mountcalib(),)
    if scanpositions is None:
        scanpositions = (
            _scanposition("SP01", images=(_image("SP01 - Image001"),), scans=("151120_150227",)),
            _scanposition("SP02", images=(_image("SP02 - Image001"),), scans=("151120_155528",)),
        )
    calibrations = f"""
  <calibrations>
    <camcalibs>{''.join(camcalibs)}</camcalibs>
    <mountcalibs>{''.join(mountcalibs)}</mountcalibs>
  </calibrations>"""
    positions = f"""
  <scanpositions>{''.join(scanpositions)}</scanpositions>"""
    body = calibrations + positions if calibrations_first else positions + calibrations
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<project>
  <name>test</name>
  <pop><matrix>{pop}</matrix></pop>{body}
</project>
"""


@pytest.fixture
def rsp() -> SimpleNamespace:
    """Builders for small RiSCAN Pro project XML documents."""
    return SimpleNamespace(
        IDENTITY=IDENTITY,
        camcalib=_camcalib,
        mountcalib=_mountcalib,
        image=_image,
        scanposition=_scanposition,
        project=_project,
    )


@pytest.fixture
def write_project(tmp_path: Path) -> Callable[[str], Path]:
    """Write project XML to `<tmp>/project.RiSCAN/project.rsp`; returns the project directory."""

    def _write(xml: str) -> Path:
        root = tmp_path / "project.RiSCAN"
        root.mkdir(parents=True, exist_ok=True)
        (root / "project.rsp").write_text(xml, encoding="utf-8")
        return root

    return _write
