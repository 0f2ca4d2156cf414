"""
Decoder for the geometry (.shp) part of a shapefile, following the layout in
the ESRI Shapefile Technical Description.
"""

from __future__ import annotations

import io
import logging
from struct import Struct, error, unpack

from .constants import SHP_FILE_CODE, SHP_HEADER_LENGTH, SHP_RECORD_HEADER_LENGTH
from .exceptions import FormatError, UnsupportedShapeError
from .shapes import Shape, ShapefileHeader, ShapeRecord, shape_class_for

logger = logging.getLogger(__name__)

# record number, content length in 16-bit words
_RECORD_HEADER_STRUCT = Struct(">2i")


def decode_header(data: bytes) -> ShapefileHeader:
    """Reads the header information from the first 100 bytes of a .shp file."""
    if len(data) < SHP_HEADER_LENGTH:
        raise FormatError(
            f"Shapefile header requires {SHP_HEADER_LENGTH} bytes, got {len(data)}"
        )
    (fileCode,) = unpack(">i", data[:4])
    if fileCode != SHP_FILE_CODE:
        raise FormatError(f"Unknown file code: {fileCode}")
    (wordLength,) = unpack(">i", data[24:28])
    version, shapeType = unpack("<2i", data[28:36])
    # xmin, ymin, xmax, ymax, zmin, zmax, mmin, mmax
    bounds = unpack("<8d", data[36:100])
    return ShapefileHeader(fileCode, wordLength, version, shapeType, *bounds)


def decode_shp(data: bytes) -> tuple[ShapefileHeader, list[ShapeRecord]]:
    """Decodes a whole .shp buffer into its header and the list of shape
    records, in file order.

    The header's file length decides where the record body ends; bytes past
    it are ignored. Every record must consume exactly the number of bytes its
    record header declares. Any problem raises FormatError or
    UnsupportedShapeError and nothing is returned.
    """
    data = bytes(data)
    header = decode_header(data)
    byteLength = header.byteLength
    if byteLength > len(data):
        raise FormatError(
            f"Header declares {byteLength} bytes but the file only has {len(data)}"
        )

    records: list[ShapeRecord] = []
    pos = SHP_HEADER_LENGTH
    while pos < byteLength:
        if pos + SHP_RECORD_HEADER_LENGTH > byteLength:
            raise FormatError(f"Truncated record header at byte {pos}")
        recNum, recLength = _RECORD_HEADER_STRUCT.unpack(
            data[pos : pos + SHP_RECORD_HEADER_LENGTH]
        )
        pos += SHP_RECORD_HEADER_LENGTH

        # Convert from num of 16 bit words, to 8 bit bytes
        recLength_bytes = 2 * recLength
        if recLength < 2 or pos + recLength_bytes > byteLength:
            raise FormatError(
                f"Record content length of {recLength} words does not fit the file",
                recNum,
            )

        shape = _decode_shape(data[pos : pos + recLength_bytes], recNum)
        records.append(ShapeRecord(recNum, recLength, shape))
        pos += recLength_bytes

    logger.debug(
        "Decoded %d %s records from %d bytes",
        len(records),
        header.shapeTypeName,
        byteLength,
    )
    return header, records


def _decode_shape(payload: bytes, recNum: int) -> Shape:
    b_io = io.BytesIO(payload)
    try:
        (shapeType,) = unpack("<i", b_io.read(4))
        ShapeClass = shape_class_for(shapeType)
        shape = ShapeClass.from_byte_stream(b_io)
    except UnsupportedShapeError as e:
        raise UnsupportedShapeError(e.shape_type, e.shape_name, recNum) from e
    except FormatError as e:
        raise FormatError(f"Shape parsing error: {e}", recNum) from e
    except error as e:
        raise FormatError(f"Shape parsing error: truncated shape content ({e})", recNum) from e

    consumed = b_io.tell()
    if consumed != len(payload):
        raise FormatError(
            f"{shape.shapeTypeName} content is {consumed} bytes but the record "
            f"header declares {len(payload)}",
            recNum,
        )
    return shape
