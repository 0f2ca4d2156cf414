from __future__ import annotations

import os
import re

# Module settings
VERBOSE = os.getenv("SHP2GEOJSON_VERBOSE", "yes").lower() != "no"

DEFAULT_ENCODING = os.getenv("SHP2GEOJSON_ENCODING", "utf-8")

# Raise EncodingMismatchError instead of logging when the .dbf text view
# does not line up with the binary field widths.
STRICT_ENCODING = os.getenv("SHP2GEOJSON_STRICT_ENCODING", "").lower() == "yes"

# Constants for shape types
NULL = 0
POINT = 1
POLYLINE = 3
POLYGON = 5
MULTIPOINT = 8
POINTZ = 11
POLYLINEZ = 13
POLYGONZ = 15
MULTIPOINTZ = 18
POINTM = 21
POLYLINEM = 23
POLYGONM = 25
MULTIPOINTM = 28
MULTIPATCH = 31

SHAPETYPE_LOOKUP = {
    NULL: "Null",
    POINT: "Point",
    POLYLINE: "Polyline",
    POLYGON: "Polygon",
    MULTIPOINT: "MultiPoint",
    POINTZ: "PointZ",
    POLYLINEZ: "PolylineZ",
    POLYGONZ: "PolygonZ",
    MULTIPOINTZ: "MultiPointZ",
    POINTM: "PointM",
    POLYLINEM: "PolylineM",
    POLYGONM: "PolygonM",
    MULTIPOINTM: "MultiPointM",
    MULTIPATCH: "MultiPatch",
}

# Valid shapefile variants this package does not decode.
UNSUPPORTED_SHAPETYPES = frozenset(
    [
        POINTZ,
        POLYLINEZ,
        POLYGONZ,
        MULTIPOINTZ,
        POINTM,
        POLYLINEM,
        POLYGONM,
        MULTIPOINTM,
        MULTIPATCH,
    ]
)

# .shp layout
SHP_FILE_CODE = 0x0000270A
SHP_HEADER_LENGTH = 100
SHP_RECORD_HEADER_LENGTH = 8

# .dbf layout
DBF_HEADER_LENGTH = 32
DBF_FIELD_DESCRIPTOR_LENGTH = 32
DBF_FIELD_NAME_LENGTH = 10
DBF_FIELD_TERMINATOR = 0x0D
DBF_DELETION_FLAG_LENGTH = 1

# Numbers some exporters write into character fields, e.g. 1.23456789012e+003
SCIENTIFIC_NOTATION = re.compile(r"^\d\.\d{11}e\+\d{3}$", re.IGNORECASE)

WGS84 = "EPSG:4326"
WGS84_PROJ4 = "+proj=longlat +datum=WGS84 +no_defs +type=crs"
