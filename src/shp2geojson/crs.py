"""
Coordinate reference system lookups and transforms, backed by pyproj.

Output is always WGS84 longitude/latitude. Sources come from a .prj file,
an EPSG code or a name registered with define_projection().
"""

from __future__ import annotations

import logging
from typing import Union

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from .constants import WGS84, WGS84_PROJ4
from .exceptions import ProjectionError
from .types import Point2D, TransformFunc

logger = logging.getLogger(__name__)

CRSInputT = Union[CRS, str, int]

_projections: dict[str, CRS] = {}


def _parse(definition: CRSInputT) -> CRS:
    try:
        return CRS.from_user_input(definition)
    except CRSError as e:
        raise ProjectionError(f"Unsupported Projection: {e}") from e


def define_projection(name: str, definition: CRSInputT) -> CRS:
    """Registers a named coordinate system from a PROJ string, WKT (including
    the ESRI flavour found in .prj files), an EPSG code or a pyproj CRS."""
    crs = _parse(definition)
    _projections[name] = crs
    logger.debug("Defined projection %s: %s", name, crs.name)
    return crs


def get_projection(name: CRSInputT) -> CRS:
    """Returns a registered projection, or parses `name` as a CRS definition
    such as "EPSG:3826"."""
    if isinstance(name, str) and name in _projections:
        return _projections[name]
    return _parse(name)


def projection_from_prj(text: str) -> CRS:
    """Parses the contents of a .prj file without registering it."""
    text = text.strip()
    if not text:
        raise ProjectionError("Unsupported Projection: empty .prj definition")
    return _parse(text)


def identity_transform(x: float, y: float) -> Point2D:
    return x, y


def make_transform(source: CRSInputT, target: CRSInputT = WGS84) -> TransformFunc:
    """Returns a function mapping (x, y) in `source` to (lon, lat) in `target`."""
    transformer = Transformer.from_crs(
        get_projection(source), get_projection(target), always_xy=True
    )

    def _transform(x: float, y: float) -> Point2D:
        try:
            lon, lat = transformer.transform(x, y, errcheck=True)
        except ProjError as e:
            raise ProjectionError(f"Could not transform ({x}, {y}): {e}") from e
        return lon, lat

    return _transform


def transform(source: CRSInputT, target: CRSInputT, xy: Point2D) -> Point2D:
    """Transforms a single coordinate pair from `source` to `target`."""
    return make_transform(source, target)(*xy)


define_projection(WGS84, WGS84_PROJ4)
