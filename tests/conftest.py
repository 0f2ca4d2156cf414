"""
Builders for in-memory shapefiles, shared by the test modules as fixtures.
"""

import io
import struct
import zipfile

import pytest

WGS84_PRJ = (
    'GEOGCS["GCS_WGS_1984",DATUM["D_WGS_1984",SPHEROID["WGS_1984",6378137.0,'
    '298.257223563]],PRIMEM["Greenwich",0.0],UNIT["Degree",0.0174532925199433]]'
)


def point_payload(x, y):
    return struct.pack("<2d", x, y)


def _bbox_of(points):
    xs = [p[0] for p in points] or [0.0]
    ys = [p[1] for p in points] or [0.0]
    return min(xs), min(ys), max(xs), max(ys)


def multipart_payload(points, parts):
    """Polyline / Polygon content: bbox, nParts, nPoints, parts, points."""
    flat = [c for p in points for c in p]
    return (
        struct.pack("<4d", *_bbox_of(points))
        + struct.pack("<2i", len(parts), len(points))
        + struct.pack(f"<{len(parts)}i", *parts)
        + struct.pack(f"<{len(flat)}d", *flat)
    )


def multipoint_payload(points):
    flat = [c for p in points for c in p]
    return (
        struct.pack("<4d", *_bbox_of(points))
        + struct.pack("<i", len(points))
        + struct.pack(f"<{len(flat)}d", *flat)
    )


def shp_record(number, shape_type, payload=b""):
    content = struct.pack("<i", shape_type) + payload
    return struct.pack(">2i", number, len(content) // 2) + content


def build_shp(shape_type, records, bbox=(0.0, 0.0, 0.0, 0.0), file_code=9994):
    """Assembles a .shp file from already packed records (see shp_record)."""
    body = b"".join(records)
    header = (
        struct.pack(">7i", file_code, 0, 0, 0, 0, 0, (100 + len(body)) // 2)
        + struct.pack("<2i", 1000, shape_type)
        + struct.pack("<8d", *bbox, 0.0, 0.0, 0.0, 0.0)
    )
    return header + body


def build_dbf(
    fields,
    records,
    encoding="utf-8",
    deleted=(),
    extra_header=b"",
    record_padding=0,
):
    """Assembles a .dbf file. `fields` is a list of (name, type, size) and
    each record a list of str values, encoded with `encoding`."""
    header_length = 32 + 32 * len(fields) + 1 + len(extra_header)
    record_length = 1 + sum(size for __name, __typ, size in fields) + record_padding
    header = struct.pack(
        "<4BIHH20x", 3, 124, 5, 17, len(records), header_length, record_length
    )
    descriptors = b"".join(
        struct.pack("<11sc4xBB14x", name.encode(encoding), typ.encode("ascii"), size, 0)
        for name, typ, size in fields
    )
    body = b""
    for i, record in enumerate(records):
        body += b"*" if i in deleted else b" "
        for (__name, typ, size), value in zip(fields, record):
            raw = value.encode(encoding)
            body += raw.rjust(size) if typ in "NF" else raw.ljust(size)
        body += b" " * record_padding
    return header + descriptors + b"\r" + extra_header + body + b"\x1a"


def build_zip(files):
    """Zips a dict of archive member name -> bytes."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        for name, data in files.items():
            archive.writestr(name, data)
    return buf.getvalue()


def taipei_files(prj=WGS84_PRJ):
    """One WGS84 point at (121.5, 25.0) with the attribute name=Taipei."""
    shp = build_shp(
        1,
        [shp_record(1, 1, point_payload(121.5, 25.0))],
        bbox=(121.5, 25.0, 121.5, 25.0),
    )
    dbf = build_dbf([("name", "C", 20)], [["Taipei"]])
    files = {"taipei.shp": shp, "taipei.dbf": dbf}
    if prj is not None:
        files["taipei.prj"] = prj.encode("ascii")
    return files


@pytest.fixture
def shp_builder():
    class Builder:
        point = staticmethod(point_payload)
        multipart = staticmethod(multipart_payload)
        multipoint = staticmethod(multipoint_payload)
        record = staticmethod(shp_record)
        build = staticmethod(build_shp)

    return Builder


@pytest.fixture
def dbf_builder():
    return build_dbf


@pytest.fixture
def zip_builder():
    return build_zip


@pytest.fixture
def taipei():
    return taipei_files
