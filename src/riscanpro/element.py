"""
Slash-path helpers over `xml.etree.ElementTree` elements.

Paths are plain child names joined by "/", e.g. "sop/matrix"; no XPath
predicates or wildcards.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

import numpy as np

from riscanpro.core.transform import parse_matrix4
from riscanpro.errors import LiteralParseError, MissingElementError, MissingNoderefError, MissingTextError


def child(element: ET.Element, path: str) -> ET.Element:
    current = element
    for name in path.split("/"):
        found = current.find(name) if name else None
        if found is None:
            raise MissingElementError(current.tag, name)
        current = found
    return current


def children(element: ET.Element, path: str, *, required: bool = True) -> list[ET.Element]:
    """
    Elements named by the last path segment under the node named by the rest.

    With required=False a missing parent node yields an empty list.
    """
    parent_path, _, name = path.rpartition("/")
    if not name:
        raise MissingElementError(element.tag, path)
    try:
        parent = child(element, parent_path) if parent_path else element
    except MissingElementError:
        if required:
            raise
        return []
    if name == "*":
        return list(parent)
    return parent.findall(name)


def text(element: ET.Element, path: str) -> str:
    node = child(element, path)
    if node.text is None or not node.text.strip():
        raise MissingTextError(path)
    return node.text.strip()


def parse_float(element: ET.Element, path: str) -> float:
    s = text(element, path)
    try:
        return float(s)
    except ValueError as e:
        raise LiteralParseError(path, s) from e


def parse_int(element: ET.Element, path: str) -> int:
    s = text(element, path)
    try:
        return int(s)
    except ValueError as e:
        raise LiteralParseError(path, s) from e


def parse_matrix(element: ET.Element, path: str) -> np.ndarray:
    return parse_matrix4(text(element, path))


def noderef(element: ET.Element, path: str) -> str:
    """
    Name referenced by a `noderef` attribute: the last segment of the path,
    so "/calibrations/camcalibs/Infratec" refers to "Infratec".
    """
    node = child(element, path)
    ref = node.get("noderef")
    if ref is None:
        raise MissingNoderefError(path)
    name = ref.rstrip("/").split("/")[-1]
    if not name:
        raise MissingNoderefError(path)
    return name
