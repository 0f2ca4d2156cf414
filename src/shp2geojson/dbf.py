"""
Decoder for the attribute (.dbf) part of a shapefile.

The binary layout follows the xBase format description
(http://www.clicketyclick.dk/databases/xbase/format/dbf.html). Header and
field descriptors are read from the raw bytes. Field names and record values
are read from a character decoded rendering of the same file, so that
multi-byte code pages (Big5, UTF-8, ...) come out as whole characters. The
two views are kept in step by walking the decoded text one character at a
time and adding up how many bytes each character occupies in the file's
encoding, see byte_width_of(). Bytes the codec cannot decode are escaped one
character per byte (the "surrogateescape" error handler), so the binary
header fields never throw the walk off.
"""

from __future__ import annotations

import codecs
import logging
import re
from functools import lru_cache
from struct import Struct
from typing import NamedTuple

from . import constants
from .constants import (
    DBF_DELETION_FLAG_LENGTH,
    DBF_FIELD_DESCRIPTOR_LENGTH,
    DBF_FIELD_NAME_LENGTH,
    DBF_FIELD_TERMINATOR,
    DBF_HEADER_LENGTH,
    SCIENTIFIC_NOTATION,
)
from .exceptions import EncodingMismatchError, FormatError
from .types import AttributeRecordT, FieldTypeT, RecordValue

logger = logging.getLogger(__name__)

# Lone surrogates left by decoding with "surrogateescape", one per raw byte
_ESCAPED_BYTES = re.compile("[\udc80-\udcff]")

# version, year, month, day, numRecords, headerLength, recordLength,
# (2 reserved), incompleteTransaction, encryptionFlag,
# (4 free record thread, 8 reserved), mdxFlag, languageDriverId, (2 reserved)
_HEADER_STRUCT = Struct("<4BIHH2xBB12xBB2x")

# name (10 bytes + NUL), type, (4 data address), length, decimal count,
# (2 reserved), work area id, (2 reserved), set fields flag, (7 reserved),
# index field flag
_FIELD_STRUCT = Struct("<11sc4xBBxxBxxB7xB")


class DBFHeader(NamedTuple):
    version: int
    year: int
    month: int
    day: int
    numRecords: int
    headerLength: int
    recordLength: int
    incompleteTransaction: int
    encryptionFlag: int
    mdxFlag: int
    languageDriverId: int


class FieldDescriptor(NamedTuple):
    name: str
    fieldType: FieldTypeT
    fieldLength: int
    decimal: int
    workAreaId: int
    setFieldFlag: int
    indexFieldFlag: int


@lru_cache(maxsize=4096)
def byte_width_of(char: str, encoding: str) -> int:
    """Returns the number of bytes a decoded character occupies in the raw
    file, according to the codec for `encoding`.

    Characters the codec cannot encode count as one byte. These are the
    surrogates "surrogateescape" decoding leaves for bytes that are not valid
    text, such as the binary numbers in the header.

    >>> byte_width_of("a", "big5"), byte_width_of("中", "big5"), byte_width_of("中", "utf-8")
    (1, 2, 3)
    >>> byte_width_of(b"\\x81".decode("utf-8", "surrogateescape"), "utf-8")
    1
    """
    try:
        return len(char.encode(encoding))
    except UnicodeEncodeError:
        return 1


def _walk(text: str, start: int, nbytes: int, encoding: str) -> tuple[int, int]:
    """Advances a character cursor from `start` until the characters passed
    cover `nbytes` raw bytes, or the text runs out. Returns the new cursor
    and the number of bytes actually covered, which overshoots `nbytes` when
    a multi-byte character straddles the boundary."""
    pos = start
    covered = 0
    end = len(text)
    while covered < nbytes and pos < end:
        covered += byte_width_of(text[pos], encoding)
        pos += 1
    return pos, covered


def _split_text_view(text: str) -> tuple[str, str]:
    """Splits the decoded file on carriage returns into the header segment
    (binary header plus field descriptors) and the record segment."""
    parts = text.split("\r")
    if len(parts) > 2:
        body = parts.pop()
        return "\r".join(parts), body
    if len(parts) == 2:
        return parts[0], parts[1]
    return parts[0], ""


def _unescape(text: str) -> str:
    return _ESCAPED_BYTES.sub("\ufffd", text)


def _parse_value(raw: str) -> RecordValue:
    value = _unescape(raw).replace("\x00", "").strip()
    if SCIENTIFIC_NOTATION.match(value):
        return float(value)
    return value


def decode_header(data: bytes) -> DBFHeader:
    """Reads the fixed 32 byte header of a .dbf file."""
    if len(data) < DBF_HEADER_LENGTH:
        raise FormatError(
            f"dbf header requires {DBF_HEADER_LENGTH} bytes, got {len(data)}"
        )
    (
        version,
        year,
        month,
        day,
        numRecords,
        headerLength,
        recordLength,
        incompleteTransaction,
        encryptionFlag,
        mdxFlag,
        languageDriverId,
    ) = _HEADER_STRUCT.unpack(data[:DBF_HEADER_LENGTH])
    return DBFHeader(
        version,
        year + 1900,
        month,
        day,
        numRecords,
        headerLength,
        recordLength,
        incompleteTransaction,
        encryptionFlag,
        mdxFlag,
        languageDriverId,
    )


def _decode_field_descriptors(data: bytes) -> tuple[list[tuple], int]:
    """Reads the binary field descriptors up to the 0x0D terminator. Returns
    the raw descriptor tuples and the byte offset just past the terminator."""
    descriptors = []
    pos = DBF_HEADER_LENGTH
    while True:
        if pos >= len(data):
            raise FormatError(
                "Shapefile dbf header lacks expected terminator. (likely corrupt?)"
            )
        if data[pos] == DBF_FIELD_TERMINATOR:
            break
        if pos + DBF_FIELD_DESCRIPTOR_LENGTH > len(data):
            raise FormatError(f"Truncated dbf field descriptor at byte {pos}")
        descriptors.append(
            _FIELD_STRUCT.unpack(data[pos : pos + DBF_FIELD_DESCRIPTOR_LENGTH])
        )
        pos += DBF_FIELD_DESCRIPTOR_LENGTH
    return descriptors, pos + 1


def _raw_field_name(encoded_name: bytes, encoding: str) -> str:
    if b"\x00" in encoded_name:
        encoded_name = encoded_name[: encoded_name.index(b"\x00")]
    else:
        encoded_name = encoded_name[:DBF_FIELD_NAME_LENGTH]
    return encoded_name.decode(encoding, "replace").strip()


def _field_names_from_text(header_text: str, encoding: str) -> list[str]:
    # skip the characters taken up by the fixed binary header
    pos, __ = _walk(header_text, 0, DBF_HEADER_LENGTH, encoding)
    names = []
    while pos < len(header_text):
        stop, __ = _walk(header_text, pos, DBF_FIELD_NAME_LENGTH, encoding)
        names.append(_unescape(header_text[pos:stop]).split("\x00", 1)[0].strip())
        pos, __ = _walk(header_text, pos, DBF_FIELD_DESCRIPTOR_LENGTH, encoding)
    return names


def decode_dbf(
    data: bytes,
    text: str | None = None,
    encoding: str = "utf-8",
    strict: bool | None = None,
) -> tuple[DBFHeader, list[FieldDescriptor], list[AttributeRecordT]]:
    """Decodes a .dbf file into its header, field descriptors and one
    attribute record (a dict of field name to value) per record.

    `text` is the whole file decoded with `encoding`; it is produced here
    with the "surrogateescape" error handler when not given. The header
    segment (binary header and field descriptors) is always decoded from
    `data` that way, so every undecodable binary byte stays exactly one
    character wide whatever handler produced `text`. Deleted records are
    returned like any other record so that record i still belongs to shape i.

    When the text view does not line up with the binary field widths
    (typically because `encoding` is not the file's real code page), strict
    mode raises EncodingMismatchError. Otherwise values come out garbled and
    a warning is logged.
    """
    data = bytes(data)
    encoding = codecs.lookup(encoding).name
    if text is None:
        text = data.decode(encoding, "surrogateescape")
    if strict is None:
        strict = constants.STRICT_ENCODING

    # collect alignment problems, reported once at the end unless strict
    errors: dict[str, int] = {}

    def misaligned(
        message: str,
        record_number: int | None = None,
        field_name: str | None = None,
    ) -> None:
        if strict:
            raise EncodingMismatchError(message, record_number, field_name)
        errors[message] = errors.get(message, 0) + 1

    header = decode_header(data)
    raw_fields, fieldpos = _decode_field_descriptors(data)
    layoutLength = DBF_DELETION_FLAG_LENGTH + sum(f[2] for f in raw_fields)
    if layoutLength > header.recordLength:
        raise FormatError(
            f"Fields need {layoutLength} bytes per record but the header "
            f"declares {header.recordLength}"
        )
    if fieldpos > header.headerLength:
        raise FormatError(
            f"Field descriptors end at byte {fieldpos} but the header "
            f"declares a length of {header.headerLength}"
        )
    expected = header.headerLength + header.numRecords * header.recordLength
    if len(data) < expected:
        raise FormatError(
            f"dbf file is truncated: {header.numRecords} records need "
            f"{expected} bytes, got {len(data)}"
        )

    text_header, body = _split_text_view(text)
    try:
        # up to, not including, the terminator
        header_text = data[: fieldpos - 1].decode(encoding, "surrogateescape")
    except UnicodeDecodeError:
        # codecs that cannot escape ascii bytes, e.g. utf-16
        header_text = text_header
    names = _field_names_from_text(header_text, encoding)
    if len(names) != len(raw_fields):
        misaligned(
            f"Found {len(names)} field names in the decoded text but "
            f"{len(raw_fields)} field descriptors"
        )
        names = [_raw_field_name(f[0], encoding) for f in raw_fields]

    fields = [
        FieldDescriptor(
            name,
            fieldType.decode("ascii", "replace"),
            size,
            decimal,
            workAreaId,
            setFieldFlag,
            indexFieldFlag,
        )
        for name, (
            __encoded_name,
            fieldType,
            size,
            decimal,
            workAreaId,
            setFieldFlag,
            indexFieldFlag,
        ) in zip(names, raw_fields)
    ]

    # anything between the terminator and the first record, e.g. the
    # Visual FoxPro backlink area
    pos, __ = _walk(body, 0, header.headerLength - fieldpos, encoding)
    padding = header.recordLength - layoutLength

    records: list[AttributeRecordT] = []
    for i in range(header.numRecords):
        if pos >= len(body):
            misaligned("Decoded record text ended before the last record", i)
        pos += DBF_DELETION_FLAG_LENGTH
        record: AttributeRecordT = {}
        for field in fields:
            stop, covered = _walk(body, pos, field.fieldLength, encoding)
            if covered > field.fieldLength:
                misaligned(
                    "Character widths overshoot a field's declared length",
                    i,
                    field.name,
                )
            elif covered < field.fieldLength:
                misaligned("Decoded record text ended inside a field", i, field.name)
            record[field.name] = _parse_value(body[pos:stop])
            pos = stop
        if padding:
            pos, __ = _walk(body, pos, padding, encoding)
        records.append(record)

    if constants.VERBOSE and errors:
        logger.warning(
            "Decoded .dbf text does not line up with the field widths, values may "
            "be garbled (is %r the right encoding?): %s",
            encoding,
            "; ".join(f"{msg} (x{count})" for msg, count in errors.items()),
        )

    logger.debug(
        "Decoded %d records with %d fields using %s",
        len(records),
        len(fields),
        encoding,
    )
    return header, fields, records
