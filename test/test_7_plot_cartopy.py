import cartopy.crs as ccrs
import matplotlib.pyplot as plt
import numpy as np
import pytest
from cartopy.mpl.geoaxes import GeoAxes
from matplotlib.colors import to_rgba

from cartoplot.exceptions import MissingColumn
from cartoplot.geometry import points_frame
from cartoplot.mapping.cartopy_plot import CartopyPlotEngine

# ========================================= <cartoplot.CartopyPlotEngine> =========================================


@pytest.fixture
def engine():
    return CartopyPlotEngine()


@pytest.fixture
def ax(engine):
    ax = engine.new_map()
    yield ax
    plt.close(ax.figure)


def test_new_map(engine):
    ax = engine.new_map("robinson", figsize=(6, 3))
    assert isinstance(ax, GeoAxes)
    assert isinstance(ax.projection, ccrs.Robinson)
    assert tuple(ax.figure.get_size_inches()) == (6, 3)
    plt.close(ax.figure)


def test_plot_geo_data_frame(engine, ax, lonlat_regions):
    engine.plot_geo_data_frame(ax, lonlat_regions, facecolor="none", edgecolor="black")
    assert len(ax.collections) == 1


def test_plot_geo_data_frame_split(engine, ax, lonlat_regions):
    engine.plot_geo_data_frame(ax, lonlat_regions, split="name", facecolor="none")
    labels = [c.get_label() for c in ax.collections]
    assert labels == ["north", "south", "east"]
    # unfilled polygons take the group colour on their outline
    assert np.allclose(ax.collections[0].get_edgecolor()[0], to_rgba("#1f77b4"))
    assert np.allclose(ax.collections[1].get_edgecolor()[0], to_rgba("#ff7f0e"))


def test_plot_geo_data_frame_split_single_group(engine, ax, lonlat_regions):
    engine.plot_geo_data_frame(ax, lonlat_regions.assign(kind="state"), split="kind")
    assert [c.get_label() for c in ax.collections] == ["state"]

    engine.plot_geo_data_frame(ax, lonlat_regions.iloc[:1], split=True)
    assert len(ax.collections) == 2
    assert ax.collections[1].get_label() == "0"


def test_plot_geo_data_frame_reprojects(engine, projected_squares):
    ax = engine.new_map()
    engine.plot_geo_data_frame(ax, projected_squares)
    paths = ax.collections[0].get_paths()
    # 2 km in Web Mercator is about 0.018 degrees of longitude
    assert paths[1].vertices[:, 0].max() == pytest.approx(0.01797, abs=1e-4)
    plt.close(ax.figure)


def test_plot_points_numeric_color(engine, ax, points_table):
    gdf = points_frame(points_table)
    engine.plot_points(ax, gdf, color="mag", size="mag")
    assert len(ax.collections) == 1
    scatter = ax.collections[0]
    assert np.allclose(scatter.get_array(), points_table["mag"])
    assert np.allclose(sorted(scatter.get_sizes())[::3], [16, 900])


def test_plot_points_categorical_color(engine, ax, points_table):
    engine.plot_points(ax, points_frame(points_table), color="kind")
    labels = [c.get_label() for c in ax.collections]
    assert labels == ["quake", "blast"]
    assert len(ax.collections[0].get_offsets()) == 3


def test_plot_points_literal_color(engine, ax, points_table):
    engine.plot_points(ax, points_frame(points_table), color="red", size=50)
    scatter = ax.collections[0]
    assert np.allclose(scatter.get_facecolor()[0], to_rgba("red"))
    assert np.allclose(scatter.get_sizes(), [50])


def test_plot_choropleth(engine, ax, lonlat_regions):
    engine.plot_choropleth(ax, lonlat_regions, "rate", cmap="Blues")
    assert len(ax.collections) == 1
    facecolors = ax.collections[0].get_facecolor()
    assert len(np.unique(facecolors, axis=0)) == 3
    # the colour bar lives in its own axes
    assert len(ax.figure.axes) == 2

    with pytest.raises(MissingColumn):
        engine.plot_choropleth(ax, lonlat_regions, "population")


def test_add_basemap_without_tiles(engine, ax):
    engine.add_basemap(ax, "white-bg", extent=(140, 150, -40, -30))
    assert ax.get_facecolor() == to_rgba("white")
    assert np.allclose(ax.get_extent(ccrs.PlateCarree()), (140, 150, -40, -30))


def test_add_basemap_needs_geoaxes(engine):
    fig, ax = plt.subplots()
    with pytest.raises(TypeError):
        engine.add_basemap(ax, "open-street-map")
    plt.close(fig)
