from __future__ import annotations

import array
import io
from collections.abc import Iterator
from struct import unpack
from typing import Generic, NamedTuple, TypeVar, cast

from .constants import (
    MULTIPOINT,
    NULL,
    POINT,
    POLYGON,
    POLYLINE,
    SHAPETYPE_LOOKUP,
    UNSUPPORTED_SHAPETYPES,
)
from .exceptions import FormatError, UnsupportedShapeError
from .types import BBox, Point2D, ReadableBinStream

ARR_TYPE = TypeVar("ARR_TYPE", int, float)


class _Array(array.array, Generic[ARR_TYPE]):  # type: ignore[type-arg]
    """Holds the parts and the flat point coordinates of a shape."""

    def __repr__(self) -> str:
        return str(self.tolist())


class ShapefileHeader(NamedTuple):
    """The fixed 100 byte header at the start of a .shp file."""

    fileCode: int
    wordLength: int
    version: int
    shapeType: int
    minX: float
    minY: float
    maxX: float
    maxY: float
    minZ: float
    maxZ: float
    minM: float
    maxM: float

    @property
    def byteLength(self) -> int:
        # File length (16-bit word * 2 = bytes)
        return self.wordLength * 2

    @property
    def bbox(self) -> BBox:
        return self.minX, self.minY, self.maxX, self.maxY

    @property
    def shapeTypeName(self) -> str:
        return SHAPETYPE_LOOKUP.get(self.shapeType, f"Unknown({self.shapeType})")


class Shape:
    """Base class of the geometries a .shp record can hold.

    The family is closed: NullShape, Point and the three MultiPartShape
    subclasses (Polyline, Polygon, MultiPoint). Every other shape type code is
    rejected by shape_class_for() before any payload is read.
    """

    shapeType: int = NULL

    @property
    def shapeTypeName(self) -> str:
        return SHAPETYPE_LOOKUP[self.shapeType]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class NullShape(Shape):
    shapeType = NULL

    @classmethod
    def from_byte_stream(cls, b_io: ReadableBinStream) -> NullShape:
        return cls()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NullShape)


class Point(Shape):
    shapeType = POINT

    def __init__(self, x: float, y: float):
        self.x = x
        self.y = y

    @classmethod
    def from_byte_stream(cls, b_io: ReadableBinStream) -> Point:
        x, y = unpack("<2d", b_io.read(16))
        return cls(x, y)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return (self.x, self.y) == (other.x, other.y)

    def __repr__(self) -> str:
        return f"Point({self.x}, {self.y})"


class MultiPartShape(Shape):
    """Shared layout of Polyline, Polygon and MultiPoint records: a bounding
    box, the start index of each part and a flat, interleaved x,y array of
    point coordinates."""

    def __init__(
        self,
        bbox: BBox,
        parts: list[int] | _Array[int],
        points: list[float] | _Array[float],
    ):
        self.minX, self.minY, self.maxX, self.maxY = bbox
        self.parts = parts
        self.points = points

    @property
    def bbox(self) -> BBox:
        return self.minX, self.minY, self.maxX, self.maxY

    @property
    def numPoints(self) -> int:
        return len(self.points) // 2

    def iter_coords(self, start: int = 0, stop: int | None = None) -> Iterator[Point2D]:
        """Yields (x, y) pairs for point indexes start <= i < stop."""
        if stop is None:
            stop = self.numPoints
        points = self.points
        for i in range(start, stop):
            yield points[2 * i], points[2 * i + 1]

    def iter_parts(self) -> Iterator[tuple[int, int]]:
        """Yields the (start, stop) point index range of every part."""
        for k, start in enumerate(self.parts):
            try:
                stop = self.parts[k + 1]
            except IndexError:
                stop = self.numPoints
            yield start, stop

    @staticmethod
    def _read_bbox_from_byte_stream(b_io: ReadableBinStream) -> BBox:
        return cast(BBox, unpack("<4d", b_io.read(32)))

    @staticmethod
    def _read_parts_from_byte_stream(
        b_io: ReadableBinStream, nParts: int
    ) -> _Array[int]:
        return _Array[int]("i", unpack(f"<{nParts}i", b_io.read(nParts * 4)))

    @staticmethod
    def _read_points_from_byte_stream(
        b_io: ReadableBinStream, nPoints: int
    ) -> _Array[float]:
        return _Array[float]("d", unpack(f"<{2 * nPoints}d", b_io.read(16 * nPoints)))

    @classmethod
    def from_byte_stream(cls, b_io: ReadableBinStream) -> MultiPartShape:
        bbox = cls._read_bbox_from_byte_stream(b_io)
        nParts, nPoints = unpack("<2i", b_io.read(8))
        if nParts < 0 or nPoints < 0:
            raise FormatError(f"Negative part or point count: {nParts}, {nPoints}")
        parts = cls._read_parts_from_byte_stream(b_io, nParts)
        points = cls._read_points_from_byte_stream(b_io, nPoints)
        return cls(bbox, parts, points)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultiPartShape):
            return NotImplemented
        return (
            self.shapeType == other.shapeType
            and self.bbox == other.bbox
            and list(self.parts) == list(other.parts)
            and list(self.points) == list(other.points)
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(parts={len(self.parts)}, "
            f"points={self.numPoints})"
        )


class Polyline(MultiPartShape):
    shapeType = POLYLINE


class Polygon(MultiPartShape):
    shapeType = POLYGON


class MultiPoint(MultiPartShape):
    shapeType = MULTIPOINT

    @classmethod
    def from_byte_stream(cls, b_io: ReadableBinStream) -> MultiPoint:
        """Reads either MultiPoint record layout, told apart by the length of
        the content: the ESRI one (bbox, point count, points) or the one
        shared with Polyline and Polygon (bbox, part and point counts, parts,
        points)."""
        content = b_io.read()
        (count,) = unpack("<i", content[32:36])
        if len(content) == 36 + 16 * count:
            # No part count or part array: the points form one implicit part.
            bbox = cast(BBox, unpack("<4d", content[:32]))
            points = _Array[float]("d", unpack(f"<{2 * count}d", content[36:]))
            parts = _Array[int]("i", [0] if count else [])
            return cls(bbox, parts, points)

        c_io = io.BytesIO(content)
        shape = cast(MultiPoint, super().from_byte_stream(c_io))
        if c_io.tell() != len(content):
            raise FormatError(
                f"MultiPoint content is {len(content)} bytes, which fits neither "
                "record layout"
            )
        return shape


SHAPE_CLASS_FROM_SHAPETYPE: dict[int, type[NullShape | Point | MultiPartShape]] = {
    NULL: NullShape,
    POINT: Point,
    POLYLINE: Polyline,
    POLYGON: Polygon,
    MULTIPOINT: MultiPoint,
}


def shape_class_for(shapeType: int) -> type[NullShape | Point | MultiPartShape]:
    """Returns the Shape subclass that decodes the given shape type code."""
    try:
        return SHAPE_CLASS_FROM_SHAPETYPE[shapeType]
    except KeyError:
        if shapeType in UNSUPPORTED_SHAPETYPES:
            raise UnsupportedShapeError(shapeType, SHAPETYPE_LOOKUP[shapeType])
        raise FormatError(f"Unknown shape type: {shapeType}")


class ShapeRecord(NamedTuple):
    """One variable length record from the body of a .shp file."""

    recordNumber: int
    # Content length of the record, in 16-bit words
    contentLength: int
    shape: Shape
