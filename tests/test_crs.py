"""
Tests for projection lookups and transforms to WGS84.
"""

import pytest

import shp2geojson
from shp2geojson import crs

TWD97_PROJ4 = (
    "+proj=tmerc +lat_0=0 +lon_0=121 +k=0.9999 +x_0=250000 +y_0=0 "
    "+ellps=GRS80 +units=m +no_defs"
)

TWD97_PRJ = (
    'PROJCS["TWD_1997_TM_Taiwan",GEOGCS["GCS_TWD_1997",DATUM["D_TWD_1997",'
    'SPHEROID["GRS_1980",6378137.0,298.257222101]],PRIMEM["Greenwich",0.0],'
    'UNIT["Degree",0.0174532925199433]],PROJECTION["Transverse_Mercator"],'
    'PARAMETER["False_Easting",250000.0],PARAMETER["False_Northing",0.0],'
    'PARAMETER["Central_Meridian",121.0],PARAMETER["Scale_Factor",0.9999],'
    'PARAMETER["Latitude_Of_Origin",0.0],UNIT["Meter",1.0]]'
)


def test_identity_transform():
    assert shp2geojson.identity_transform(121.5, 25.0) == (121.5, 25.0)


def test_wgs84_is_registered():
    wgs84 = crs.get_projection(shp2geojson.WGS84)
    assert wgs84.is_geographic


def test_define_and_get_projection():
    defined = crs.define_projection("TWD97", TWD97_PROJ4)
    assert crs.get_projection("TWD97") is defined
    assert defined.is_projected


def test_get_projection_parses_unregistered_names():
    assert crs.get_projection("EPSG:3826").is_projected


@pytest.mark.parametrize("source", ["EPSG:3826", TWD97_PROJ4, TWD97_PRJ])
def test_make_transform_to_wgs84(source):
    """
    Assert that the central meridian origin of TM2 zone 121 maps back
    to longitude 121 on the equator, whatever form the CRS comes in.
    """
    to_wgs84 = crs.make_transform(source)
    lon, lat = to_wgs84(250000, 0)
    assert lon == pytest.approx(121.0, abs=1e-6)
    assert lat == pytest.approx(0.0, abs=1e-6)


def test_make_transform_output_is_lon_lat():
    to_wgs84 = crs.make_transform("EPSG:3826")
    lon, lat = to_wgs84(302000, 2770000)
    assert 121 < lon < 122
    assert 25 < lat < 25.1


def test_transform_single_pair():
    lon, lat = crs.transform(TWD97_PROJ4, shp2geojson.WGS84, (250000, 0))
    assert (lon, lat) == pytest.approx((121.0, 0.0), abs=1e-6)


def test_projection_from_prj():
    projection = crs.projection_from_prj(TWD97_PRJ + "\n")
    assert projection.is_projected


@pytest.mark.parametrize("definition", ["", "   ", "not a projection"])
def test_unsupported_projection(definition):
    with pytest.raises(shp2geojson.ProjectionError) as excinfo:
        crs.projection_from_prj(definition)
    assert "Unsupported Projection" in str(excinfo.value)


def test_unsupported_projection_name():
    with pytest.raises(shp2geojson.ProjectionError):
        crs.make_transform("EPSG:999999")


def test_resolve_transform_prefers_prj():
    to_wgs84 = shp2geojson.resolve_transform(TWD97_PRJ, epsg=4326)
    assert to_wgs84(250000, 0) == pytest.approx((121.0, 0.0), abs=1e-6)


def test_resolve_transform_epsg():
    to_wgs84 = shp2geojson.resolve_transform(None, epsg=3826)
    assert to_wgs84(250000, 0) == pytest.approx((121.0, 0.0), abs=1e-6)


def test_resolve_transform_defaults_to_identity():
    assert shp2geojson.resolve_transform() is shp2geojson.identity_transform
    assert shp2geojson.resolve_transform(" \n") is shp2geojson.identity_transform
