"""
Locates the constituent files of a shapefile inside a zip archive, next to
each other on disk, or at a url, and returns their raw bytes.
"""

from __future__ import annotations

import io
import logging
import os
import zipfile
from typing import IO, Union
from urllib.error import HTTPError
from urllib.parse import urlparse, urlunparse
from urllib.request import Request, urlopen

from .exceptions import ShapefileException

logger = logging.getLogger(__name__)

CONSTITUENT_FILE_EXTS = ["shp", "dbf", "prj"]
assert all(ext.islower() for ext in CONSTITUENT_FILE_EXTS)

# Resource fork copies added by the macOS archiver, never real shapefiles
_IGNORED_ZIP_PREFIXES = ("__MACOSX/",)

_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_9_3) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/35.0.1916.47 Safari/537.36"

Entries = dict[str, bytes]


def fetch(url: str) -> bytes:
    """Downloads a url and returns the response body."""
    req = Request(url, headers={"User-agent": _USER_AGENT})
    with urlopen(req) as resp:
        return resp.read()


def entries_from_zip(
    zipfileobj: Union[IO[bytes], bytes, bytearray],
    member: str | None = None,
) -> Entries:
    """Reads the .shp, .dbf and .prj members of a zip archive.

    If `member` is not given the archive must contain exactly one shapefile.
    Extensions are matched case-insensitively.
    """
    if isinstance(zipfileobj, (bytes, bytearray)):
        zipfileobj = io.BytesIO(zipfileobj)
    try:
        archive = zipfile.ZipFile(zipfileobj, "r")
    except zipfile.BadZipFile as e:
        raise ShapefileException(f"Not a zip archive: {e}") from e

    with archive:
        names = [
            name
            for name in archive.namelist()
            if not name.startswith(_IGNORED_ZIP_PREFIXES)
        ]
        if not member:
            # Inspect zipfile contents to find the full shapefile path
            shapefiles = [name for name in names if name.lower().endswith(".shp")]
            if len(shapefiles) > 1:
                raise ShapefileException(
                    f"Zipfile contains more than one shapefile: {shapefiles}. "
                    "Please specify the full path to the shapefile you would like to open."
                )
            if shapefiles:
                member = shapefiles[0]
            else:
                # Let the caller report which files are missing
                dbfs = [name for name in names if name.lower().endswith(".dbf")]
                member = dbfs[0] if len(dbfs) == 1 else ""

        root = os.path.splitext(member)[0].lower()
        entries: Entries = {}
        for name in names:
            stem, ext = os.path.splitext(name)
            ext = ext[1:].lower()
            if stem.lower() == root and ext in CONSTITUENT_FILE_EXTS:
                entries[ext] = archive.read(name)

    logger.debug("Found %s in zip archive", sorted(entries))
    return entries


def entries_from_path(shapefile_name: str) -> Entries:
    """Reads the constituent files sharing the root name of `shapefile_name`,
    trying both lower and upper case extensions."""
    root, __ext = os.path.splitext(shapefile_name)
    entries: Entries = {}
    for ext in CONSTITUENT_FILE_EXTS:
        for cased_ext in [ext, ext.upper()]:
            try:
                with open(f"{root}.{cased_ext}", "rb") as f:
                    entries[ext] = f.read()
                break
            except OSError:
                continue
    return entries


def entries_from_url(url: str) -> Entries:
    """Downloads the constituent files of a shapefile from a url, which may
    point at a zip archive or at any one of the files."""
    urlinfo = urlparse(url)
    if urlinfo.path.lower().endswith(".zip"):
        return entries_from_zip(fetch(url))

    urlpath, __ = os.path.splitext(urlinfo.path)
    entries: Entries = {}
    for ext in CONSTITUENT_FILE_EXTS:
        _urlinfo = list(urlinfo)
        _urlinfo[2] = f"{urlpath}.{ext}"
        try:
            entries[ext] = fetch(urlunparse(_urlinfo))
        except HTTPError:
            pass
    return entries


def open_entries(source: Union[str, IO[bytes], bytes, bytearray]) -> Entries:
    """Returns the raw bytes of each constituent file found for `source`: a
    path to a .zip or a .shp (optionally "archive.zip/inner.shp"), a url, zip
    archive bytes, or a binary file object holding a zip archive."""
    if isinstance(source, (bytes, bytearray)) or hasattr(source, "read"):
        return entries_from_zip(source)  # type: ignore[arg-type]

    path = str(source)
    if path.startswith(("http://", "https://")):
        return entries_from_url(path)

    if ".zip" in path.lower():
        if path.lower().count(".zip") > 1:
            raise ShapefileException(
                f"Reading from multiple nested zipfiles is not supported: {path}"
            )
        # Split into zipfile and shapefile paths
        split = path.lower().find(".zip") + 4
        zpath, member = path[:split], path[split + 1 :]
        try:
            with open(zpath, "rb") as zipfileobj:
                return entries_from_zip(zipfileobj, member or None)
        except OSError as e:
            raise ShapefileException(f"Unable to open {zpath}: {e}") from e

    return entries_from_path(path)
