"""
Joins decoded shapes and attribute records into a GeoJSON FeatureCollection,
reprojecting every coordinate on the way.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .exceptions import FormatError, UnsupportedShapeError
from .geojson_types import (
    GeoJSONFeature,
    GeoJSONFeatureCollectionWithBBox,
    GeoJSONGeometry,
    Position,
)
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
from .types import AttributeRecordT, TransformFunc

logger = logging.getLogger(__name__)


def _position(transform: TransformFunc, x: float, y: float) -> Position:
    lon, lat = transform(x, y)
    return [lon, lat]


def _positions(
    transform: TransformFunc,
    shape: MultiPartShape,
    start: int = 0,
    stop: int | None = None,
) -> list[Position]:
    return [_position(transform, x, y) for x, y in shape.iter_coords(start, stop)]


def shape_to_geometry(shape: Shape, transform: TransformFunc) -> GeoJSONGeometry | None:
    """Converts one decoded shape to a GeoJSON geometry in the target CRS.

    Polylines become a single LineString through all of their points and
    polygons keep one ring per part; no rings are regrouped or rewound.
    """
    if isinstance(shape, NullShape):
        return None

    if isinstance(shape, Point):
        return {"type": "Point", "coordinates": _position(transform, shape.x, shape.y)}

    if isinstance(shape, Polyline):
        if len(shape.parts) > 1:
            logger.debug(
                "Polyline with %d parts is written as a single LineString",
                len(shape.parts),
            )
        return {"type": "LineString", "coordinates": _positions(transform, shape)}

    if isinstance(shape, MultiPoint):
        return {"type": "MultiPoint", "coordinates": _positions(transform, shape)}

    if isinstance(shape, Polygon):
        rings = [
            _positions(transform, shape, start, stop)
            for start, stop in shape.iter_parts()
        ]
        return {"type": "Polygon", "coordinates": rings}

    raise UnsupportedShapeError(shape.shapeType, shape.shapeTypeName)


def assemble(
    header: ShapefileHeader,
    shape_records: Sequence[ShapeRecord],
    attribute_records: Sequence[AttributeRecordT],
    transform: TransformFunc,
) -> GeoJSONFeatureCollectionWithBBox:
    """Builds a FeatureCollection from shape records and attribute records
    matched by position.

    `transform(x, y) -> (lon, lat)` is called once per coordinate pair. The
    bbox is made of the header's two corners, each reprojected on its own,
    which is only an approximation of the true extent for projected sources.
    """
    if len(shape_records) != len(attribute_records):
        raise FormatError(
            f"The .shp file has {len(shape_records)} records but the .dbf file "
            f"has {len(attribute_records)}"
        )

    features: list[GeoJSONFeature] = []
    for shapeRecord, record in zip(shape_records, attribute_records):
        try:
            geometry = shape_to_geometry(shapeRecord.shape, transform)
        except UnsupportedShapeError as e:
            raise UnsupportedShapeError(
                e.shape_type, e.shape_name, shapeRecord.recordNumber
            ) from e
        features.append(
            {"type": "Feature", "geometry": geometry, "properties": record}
        )

    bbox = _position(transform, header.minX, header.minY) + _position(
        transform, header.maxX, header.maxY
    )
    logger.debug("Assembled %d features", len(features))
    return {"type": "FeatureCollection", "bbox": bbox, "features": features}
