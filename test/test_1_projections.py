import cartopy.crs as ccrs
import pytest

from cartoplot.exceptions import UnknownProjection
from cartoplot.projections import (
    ProjectionSpec,
    available_projections,
    normalise_name,
    resolve_projection,
    to_cartopy,
    to_plotly,
)

# ========================================= <cartoplot.projections> =========================================


def test_default_projection():
    assert resolve_projection(None) == ProjectionSpec("equirectangular")
    assert isinstance(to_cartopy(None), ccrs.PlateCarree)
    assert to_plotly(None)["type"] == "equirectangular"


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Natural_Earth", "natural earth"),
        ("albers-usa", "albers usa"),
        ("PlateCarree", "equirectangular"),
        ("Eckert IV", "eckert4"),
        ("  conic   Equal-Area ", "conic equal area"),
        ("albers", "conic equal area"),
    ],
)
def test_normalise_name(name, expected):
    assert normalise_name(name) == expected


def test_unknown_projection():
    with pytest.raises(UnknownProjection, match="winkel"):
        resolve_projection("winkel-tripel-ish")


def test_resolve_projection_type_error():
    with pytest.raises(TypeError):
        resolve_projection(42)


def test_cartopy_crs_passes_through():
    crs = ccrs.Robinson()
    assert resolve_projection(crs) is crs
    assert to_cartopy(crs) is crs
    with pytest.raises(UnknownProjection):
        to_plotly(crs)


@pytest.mark.parametrize("name", available_projections())
def test_every_projection_builds(name):
    assert isinstance(to_cartopy(name), ccrs.Projection)
    assert to_plotly(name)["type"] == name


def test_projection_parameters():
    spec = ProjectionSpec(
        "orthographic", central_longitude=135, central_latitude=-25, scale=2
    )
    crs = to_cartopy(spec)
    assert isinstance(crs, ccrs.Orthographic)
    assert crs.proj4_params["lon_0"] == 135

    plotly_projection = to_plotly(spec)
    assert plotly_projection["rotation"] == {"lon": 135.0, "lat": -25.0, "roll": 0.0}
    assert plotly_projection["scale"] == 2


def test_conic_parallels():
    spec = ProjectionSpec("conic conformal", parallels=(30, 60))
    assert to_plotly(spec)["parallels"] == [30.0, 60.0]
    assert to_cartopy(spec).proj4_params["lat_1"] == 30.0

    with pytest.raises(ValueError):
        ProjectionSpec("conic conformal", parallels=(30,))


def test_albers_usa():
    crs = to_cartopy("albers usa")
    assert isinstance(crs, ccrs.AlbersEqualArea)
    assert crs.proj4_params["lon_0"] == -96.0
