from __future__ import annotations

from os import PathLike
from typing import IO, Any, Callable, Protocol, Union

## Custom type variables

Point2D = tuple[float, float]

BBox = tuple[float, float, float, float]

# (x, y) in the source CRS -> (lon, lat) in WGS84
TransformFunc = Callable[[float, float], Point2D]


class ReadableBinStream(Protocol):
    def read(self, size: int = -1) -> bytes: ...


# Anything load_shapefile() can open: a path or url, a binary file object
# holding a zip archive, or the zip archive itself as bytes.
ShapefileSourceT = Union[str, PathLike[Any], IO[bytes], bytes, bytearray]

FieldTypeT = str

# A value in a decoded .dbf record, kept as text unless it looks like a
# scientific notation number.
RecordValue = Union[str, float]
AttributeRecordT = dict[str, RecordValue]
