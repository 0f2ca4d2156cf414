from __future__ import annotations

import logging
import os

from . import crs
from .archive import open_entries
from .constants import DEFAULT_ENCODING
from .dbf import decode_dbf
from .exceptions import ShapefileException
from .geojson import assemble
from .geojson_types import GeoJSONFeatureCollectionWithBBox
from .shp import decode_shp
from .types import ShapefileSourceT, TransformFunc

logger = logging.getLogger(__name__)


def resolve_transform(prj: str | None = None, epsg: int | None = None) -> TransformFunc:
    """Picks the transform to WGS84 for a shapefile.

    The .prj definition wins when there is one, then an explicit EPSG code.
    Without either the coordinates are assumed to be WGS84 already.
    """
    if prj is not None and prj.strip():
        source = crs.projection_from_prj(prj)
    elif epsg is not None:
        source = crs.get_projection(f"EPSG:{epsg}")
    else:
        return crs.identity_transform
    logger.debug("Reprojecting from %s", source.name)
    return crs.make_transform(source)


def load_shapefile(
    source: ShapefileSourceT,
    /,
    *,
    encoding: str = DEFAULT_ENCODING,
    epsg: int | None = None,
    strict: bool | None = None,
) -> GeoJSONFeatureCollectionWithBBox:
    """Reads a shapefile and returns it as a GeoJSON FeatureCollection in
    WGS84 longitude/latitude.

    `source` can be the path of a zip archive (optionally followed by the
    shapefile inside it, "archive.zip/roads.shp"), the path of a .shp file
    with its .dbf and .prj alongside, a url to either, or a zip archive as
    bytes or as a binary file object. `encoding` is the code page of the .dbf
    attributes. `epsg` gives the source CRS when there is no .prj file.
    """
    if isinstance(source, os.PathLike):
        source = os.fsdecode(source)
    entries = open_entries(source)

    missing = [ext for ext in ("shp", "dbf") if ext not in entries]
    if missing:
        shapeName = source if isinstance(source, str) else type(source).__name__
        raise ShapefileException(
            f"Missing .{' and .'.join(missing)} file for shapefile: {shapeName}"
        )

    prj = entries.get("prj")
    transform = resolve_transform(
        prj.decode("utf-8", "replace") if prj is not None else None, epsg
    )

    header, shape_records = decode_shp(entries["shp"])
    dbf = entries["dbf"]
    __dbfHeader, __fields, attribute_records = decode_dbf(
        dbf, dbf.decode(encoding, "surrogateescape"), encoding, strict
    )

    collection = assemble(header, shape_records, attribute_records, transform)
    logger.info(
        "Converted %d %s features", len(collection["features"]), header.shapeTypeName
    )
    return collection


# Name of the entry point this package grew out of
loadshp = load_shapefile
