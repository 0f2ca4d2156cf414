from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .constants import DEFAULT_ENCODING
from .exceptions import ShapefileException
from .reader import load_shapefile

logger = logging.getLogger("shp2geojson")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="shp2geojson",
        description="Convert a zipped or loose shapefile to WGS84 GeoJSON.",
    )
    parser.add_argument("input", help="Path or url of a .zip archive or .shp file")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output .geojson path (defaults next to a local input, else stdout)",
    )
    parser.add_argument(
        "-e",
        "--encoding",
        default=DEFAULT_ENCODING,
        help=f"Code page of the .dbf attributes (default: {DEFAULT_ENCODING})",
    )
    parser.add_argument(
        "--epsg",
        type=int,
        help="Source EPSG code when the shapefile has no .prj file",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail when the .dbf text does not match the chosen encoding",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        collection = load_shapefile(
            args.input, encoding=args.encoding, epsg=args.epsg, strict=args.strict
        )
    except (ShapefileException, LookupError, OSError) as e:
        logger.error("%s", e)
        return 1

    output = args.output
    if output is None and "://" not in args.input:
        output = Path(args.input.split(".zip")[0]).with_suffix(".geojson")

    if output is None:
        json.dump(collection, sys.stdout)
        sys.stdout.write("\n")
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        with output.open("w", encoding="utf-8") as f:
            json.dump(collection, f, ensure_ascii=False)
        logger.info("Wrote GeoJSON: %s", output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
