"""
Tests for joining shapes and attribute records into a FeatureCollection.
"""

import json

import pytest

import shp2geojson
from shp2geojson.dbf import decode_dbf
from shp2geojson.geojson import assemble, shape_to_geometry
from shp2geojson.shp import decode_shp


def _header(bbox=(0.0, 0.0, 10.0, 10.0), shape_type=shp2geojson.POLYGON):
    return shp2geojson.ShapefileHeader(
        9994, 50, 1000, shape_type, *bbox, 0.0, 0.0, 0.0, 0.0
    )


def _record(number, shape):
    return shp2geojson.ShapeRecord(number, 0, shape)


class CountingTransform:
    def __init__(self):
        self.calls = 0

    def __call__(self, x, y):
        self.calls += 1
        return x + 100, y + 10


def test_assemble_taipei_point(taipei):
    """
    Assert the whole FeatureCollection for a single WGS84 point with one
    attribute.
    """
    files = taipei()
    header, shape_records = decode_shp(files["taipei.shp"])
    __dbfHeader, __fields, records = decode_dbf(files["taipei.dbf"])
    collection = assemble(
        header, shape_records, records, shp2geojson.identity_transform
    )
    assert collection == {
        "type": "FeatureCollection",
        "bbox": [121.5, 25.0, 121.5, 25.0],
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [121.5, 25.0]},
                "properties": {"name": "Taipei"},
            }
        ],
    }


def test_assemble_polygon_with_hole():
    """
    Assert that a polygon with parts [0, 4] and six points gives two rings
    of four and two positions, and that every coordinate (and both bbox
    corners) goes through the transform exactly once.
    """
    points = [0, 0, 0, 10, 10, 10, 0, 0, 2, 2, 3, 3]
    polygon = shp2geojson.Polygon((0, 0, 10, 10), [0, 4], points)
    transform = CountingTransform()
    collection = assemble(_header(), [_record(1, polygon)], [{"id": "1"}], transform)

    geometry = collection["features"][0]["geometry"]
    assert geometry["type"] == "Polygon"
    assert geometry["coordinates"] == [
        [[100, 10], [100, 20], [110, 20], [100, 10]],
        [[102, 12], [103, 13]],
    ]
    assert transform.calls == 6 + 2
    assert collection["bbox"] == [100, 10, 110, 20]


def test_assemble_preserves_order_and_properties():
    shapes = [
        _record(1, shp2geojson.Point(1, 1)),
        _record(2, shp2geojson.Point(2, 2)),
        _record(3, shp2geojson.Point(3, 3)),
    ]
    records = [{"n": "a"}, {"n": "b"}, {"n": "c"}]
    collection = assemble(
        _header(shape_type=shp2geojson.POINT),
        shapes,
        records,
        shp2geojson.identity_transform,
    )
    features = collection["features"]
    assert [f["properties"] for f in features] == records
    assert [f["geometry"]["coordinates"] for f in features] == [[1, 1], [2, 2], [3, 3]]


def test_assemble_length_mismatch():
    with pytest.raises(shp2geojson.FormatError):
        assemble(
            _header(),
            [_record(1, shp2geojson.Point(1, 1))],
            [{"n": "a"}, {"n": "b"}],
            shp2geojson.identity_transform,
        )


def test_assemble_empty():
    collection = assemble(_header(), [], [], shp2geojson.identity_transform)
    assert collection["features"] == []
    assert collection["bbox"] == [0.0, 0.0, 10.0, 10.0]


def test_null_shape_geometry():
    collection = assemble(
        _header(),
        [_record(1, shp2geojson.NullShape())],
        [{"n": "a"}],
        shp2geojson.identity_transform,
    )
    feature = collection["features"][0]
    assert feature["geometry"] is None
    assert feature["properties"] == {"n": "a"}


def test_polyline_geometry():
    polyline = shp2geojson.Polyline((0, 0, 2, 1), [0], [0, 0, 1, 1, 2, 0])
    geometry = shape_to_geometry(polyline, shp2geojson.identity_transform)
    assert geometry == {"type": "LineString", "coordinates": [[0, 0], [1, 1], [2, 0]]}


def test_multipart_polyline_is_one_linestring():
    polyline = shp2geojson.Polyline((0, 0, 3, 3), [0, 2], [0, 0, 1, 1, 2, 2, 3, 3])
    geometry = shape_to_geometry(polyline, shp2geojson.identity_transform)
    assert geometry["type"] == "LineString"
    assert len(geometry["coordinates"]) == 4


def test_multipoint_geometry():
    multipoint = shp2geojson.MultiPoint((5, 5, 6, 6), [0], [5, 5, 6, 6])
    geometry = shape_to_geometry(multipoint, shp2geojson.identity_transform)
    assert geometry == {"type": "MultiPoint", "coordinates": [[5, 5], [6, 6]]}


def test_unsupported_shape_geometry():
    class PointZ(shp2geojson.Shape):
        shapeType = shp2geojson.POINTZ

    with pytest.raises(shp2geojson.UnsupportedShapeError) as excinfo:
        assemble(
            _header(),
            [_record(4, PointZ())],
            [{}],
            shp2geojson.identity_transform,
        )
    assert excinfo.value.shape_name == "PointZ"
    assert excinfo.value.record_number == 4


def test_collection_serializes(taipei):
    files = taipei()
    header, shape_records = decode_shp(files["taipei.shp"])
    __dbfHeader, __fields, records = decode_dbf(files["taipei.dbf"])
    collection = assemble(
        header, shape_records, records, shp2geojson.identity_transform
    )
    assert json.loads(json.dumps(collection)) == collection
