from __future__ import annotations


class ShapefileException(Exception):
    """An exception to handle shapefile specific problems."""


class FormatError(ShapefileException):
    """Malformed or unrecognised binary structure in a .shp or .dbf file."""

    def __init__(self, message: str, record_number: int | None = None):
        if record_number is not None:
            message = f"{message} (record {record_number})"
        super().__init__(message)
        self.record_number = record_number


class UnsupportedShapeError(ShapefileException):
    """A valid shape type that this package does not decode (Z, M, MultiPatch)."""

    def __init__(
        self,
        shape_type: int,
        shape_name: str,
        record_number: int | None = None,
    ):
        message = f"Shape type not supported: {shape_type} ({shape_name})"
        if record_number is not None:
            message = f"{message} (record {record_number})"
        super().__init__(message)
        self.shape_type = shape_type
        self.shape_name = shape_name
        self.record_number = record_number


class EncodingMismatchError(ShapefileException):
    """Decoded .dbf text does not line up with the declared field widths."""

    def __init__(
        self,
        message: str,
        record_number: int | None = None,
        field_name: str | None = None,
    ):
        if field_name is not None:
            message = f"{message} (field {field_name!r})"
        if record_number is not None:
            message = f"{message} (record {record_number})"
        super().__init__(message)
        self.record_number = record_number
        self.field_name = field_name


class ProjectionError(ShapefileException):
    pass
