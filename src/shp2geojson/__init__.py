"""
shp2geojson
Converts ESRI Shapefiles (.shp, .dbf and optional .prj) into WGS84 GeoJSON,
including .dbf attributes stored in multi-byte code pages such as Big5.
Compatible with Python versions >=3.9
"""

from __future__ import annotations

import logging

from .constants import (
    MULTIPATCH,
    MULTIPOINT,
    MULTIPOINTM,
    MULTIPOINTZ,
    NULL,
    POINT,
    POINTM,
    POINTZ,
    POLYGON,
    POLYGONM,
    POLYGONZ,
    POLYLINE,
    POLYLINEM,
    POLYLINEZ,
    SHAPETYPE_LOOKUP,
    WGS84,
)
from .crs import (
    define_projection,
    get_projection,
    identity_transform,
    make_transform,
    projection_from_prj,
    transform,
)
from .dbf import DBFHeader, FieldDescriptor, byte_width_of, decode_dbf
from .exceptions import (
    EncodingMismatchError,
    FormatError,
    ProjectionError,
    ShapefileException,
    UnsupportedShapeError,
)
from .geojson import assemble, shape_to_geometry
from .reader import load_shapefile, loadshp, resolve_transform
from .shapes import (
    MultiPartShape,
    MultiPoint,
    NullShape,
    Point,
    Polygon,
    Polyline,
    Shape,
    ShapefileHeader,
    ShapeRecord,
)
from .shp import decode_shp

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "NULL",
    "POINT",
    "POLYLINE",
    "POLYGON",
    "MULTIPOINT",
    "POINTZ",
    "POLYLINEZ",
    "POLYGONZ",
    "MULTIPOINTZ",
    "POINTM",
    "POLYLINEM",
    "POLYGONM",
    "MULTIPOINTM",
    "MULTIPATCH",
    "SHAPETYPE_LOOKUP",
    "WGS84",
    "ShapefileHeader",
    "ShapeRecord",
    "Shape",
    "NullShape",
    "Point",
    "MultiPartShape",
    "Polyline",
    "Polygon",
    "MultiPoint",
    "DBFHeader",
    "FieldDescriptor",
    "ShapefileException",
    "FormatError",
    "UnsupportedShapeError",
    "EncodingMismatchError",
    "ProjectionError",
    "decode_shp",
    "decode_dbf",
    "byte_width_of",
    "assemble",
    "shape_to_geometry",
    "define_projection",
    "get_projection",
    "projection_from_prj",
    "make_transform",
    "identity_transform",
    "transform",
    "resolve_transform",
    "load_shapefile",
    "loadshp",
]

logger = logging.getLogger(__name__)
