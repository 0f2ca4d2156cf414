from __future__ import annotations

from typing import Literal, TypedDict, Union

from .types import AttributeRecordT

# RFC7946 3.1.1: "A position is an array of numbers. There MUST be two or
# more elements." Positions produced here are always [lon, lat].
Position = list[float]


class GeoJSONPoint(TypedDict):
    type: Literal["Point"]
    coordinates: Position


class GeoJSONMultiPoint(TypedDict):
    type: Literal["MultiPoint"]
    coordinates: list[Position]


class GeoJSONLineString(TypedDict):
    type: Literal["LineString"]
    # "Two or more positions" not enforced by type checker
    # https://datatracker.ietf.org/doc/html/rfc7946#section-3.1.4
    coordinates: list[Position]


class GeoJSONPolygon(TypedDict):
    type: Literal["Polygon"]
    # Ring closure and orientation are taken from the shapefile as is
    # https://datatracker.ietf.org/doc/html/rfc7946#section-3.1.6
    coordinates: list[list[Position]]


GeoJSONGeometry = Union[
    GeoJSONPoint,
    GeoJSONMultiPoint,
    GeoJSONLineString,
    GeoJSONPolygon,
]


class GeoJSONFeature(TypedDict):
    type: Literal["Feature"]
    # RFC7946 3.2: a Null shape has a null geometry
    geometry: GeoJSONGeometry | None
    properties: AttributeRecordT


class GeoJSONFeatureCollection(TypedDict):
    type: Literal["FeatureCollection"]
    features: list[GeoJSONFeature]


class GeoJSONFeatureCollectionWithBBox(GeoJSONFeatureCollection):
    # [minLon, minLat, maxLon, maxLat]
    bbox: list[float]
