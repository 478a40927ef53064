import numpy as np
import pandas as pd
import plotly.graph_objects as go
import pytest

from cartoplot.colors import assign_bins
from cartoplot.geometry import points_frame
from cartoplot.mapping.plotly_plot import PlotlyPlotEngine, _stepped_colorscale

from conftest import without_crs

# ========================================= <cartoplot.PlotlyPlotEngine> =========================================

"""
Plotly applies styles, hover labels and legend toggling per trace. These tests check how
many traces are emitted, of which type, and how they are named.
"""


@pytest.fixture
def engine():
    return PlotlyPlotEngine()


@pytest.fixture
def fig(engine):
    return engine.new_map("orthographic")


def test_new_map_outline(engine):
    fig = engine.new_map("conic conformal")
    assert isinstance(fig, go.Figure)
    assert fig.layout.geo.projection.type == "conic conformal"
    assert fig.layout.map.style is None


def test_new_map_tiles(engine):
    fig = engine.new_map(basemap="carto-positron")
    assert fig.layout.map.style == "carto-positron"
    assert fig.layout.map.zoom == 3


def test_features_single_trace(engine, fig, lonlat_regions):
    engine.plot_geo_data_frame(fig, lonlat_regions, edgecolor="black")
    assert len(fig.data) == 1
    trace = fig.data[0]
    assert trace.type == "scattergeo"
    assert trace.mode == "lines"
    assert trace.line.color == "black"
    assert trace.fill is None
    # 3 closed rings of 5 vertices, separated by None
    assert len(trace.lon) == 17
    assert trace.lon[5] is None


def test_features_split_by_column(engine, fig, lonlat_regions):
    engine.plot_geo_data_frame(
        fig, lonlat_regions, split="name", facecolor="lightgrey", hover="name"
    )
    assert [t.name for t in fig.data] == ["north", "south", "east"]
    assert all(t.fill == "toself" for t in fig.data)
    assert fig.data[0].line.color == "#1f77b4"
    assert fig.data[2].text == "east"


def test_features_split_per_row(engine, fig, lonlat_regions):
    engine.plot_geo_data_frame(fig, lonlat_regions.set_index("id"), split=True)
    assert [t.name for t in fig.data] == ["01", "02", "03"]
    assert all(t.showlegend for t in fig.data)


def test_features_reprojected(engine, fig, projected_squares):
    engine.plot_geo_data_frame(fig, projected_squares)
    lons = [v for v in fig.data[0].lon if v is not None]
    assert max(lons) == pytest.approx(0.01797, abs=1e-4)


def test_points_numeric_color(engine, fig, points_table):
    engine.plot_points(
        fig, points_frame(points_table), color="mag", size="mag", hover=["place", "mag"]
    )
    assert len(fig.data) == 1
    trace = fig.data[0]
    assert trace.mode == "markers"
    assert trace.marker.showscale
    assert trace.marker.colorscale[0][0] == 0.0
    assert min(trace.marker.size) == 4
    assert max(trace.marker.size) == 30
    assert trace.text[0] == "place: Sydney<br>mag: 4.5"


def test_points_split(engine, fig, points_table):
    engine.plot_points(fig, points_frame(points_table), color="mag", split="kind")
    assert [t.name for t in fig.data] == ["quake", "blast"]
    # one shared colour bar
    assert [bool(t.marker.showscale) for t in fig.data] == [True, False]
    assert fig.data[0].marker.cmax == fig.data[1].marker.cmax == 6.2


def test_points_categorical_color(engine, fig, points_table):
    engine.plot_points(fig, points_frame(points_table), color="kind")
    assert [t.name for t in fig.data] == ["quake", "blast"]
    assert fig.data[1].marker.color == "#ff7f0e"


def test_points_on_basemap(engine, points_table):
    fig = engine.new_map()
    engine.plot_points(fig, points_frame(points_table), basemap="open-street-map")
    assert fig.data[0].type == "scattermap"
    assert fig.layout.map.style == "open-street-map"
    assert -35 < fig.layout.map.center.lat < -30


def test_choropleth(engine, fig, lonlat_regions):
    engine.plot_choropleth(fig, lonlat_regions, "rate", cmap="viridis", hover="name")
    assert len(fig.data) == 1
    trace = fig.data[0]
    assert trace.type == "choropleth"
    assert list(trace.locations) == ["0", "1", "2"]
    assert list(trace.z) == [1.5, 3.0, 4.5]
    assert [f["id"] for f in trace.geojson["features"]] == ["0", "1", "2"]
    assert trace.featureidkey == "id"
    assert fig.layout.geo.fitbounds == "locations"


def test_choropleth_categorical(engine, fig, lonlat_regions):
    gdf = lonlat_regions.assign(
        rate_class=assign_bins(lonlat_regions["rate"], [0, 2, 5])
    )
    engine.plot_choropleth(fig, gdf, "rate_class")
    trace = fig.data[0]
    assert list(trace.z) == [0, 1, 1]
    assert list(trace.colorbar.ticktext) == ["0 - 2", "2 - 5"]
    assert trace.zmin == -0.5 and trace.zmax == 1.5


def test_choropleth_on_basemap(engine, lonlat_regions):
    fig = engine.new_map(basemap="carto-darkmatter")
    engine.plot_choropleth(fig, lonlat_regions, "rate")
    assert fig.data[0].type == "choroplethmap"


def test_frames_without_crs_are_lonlat(engine, fig, lonlat_regions, points_table):
    naive_regions = without_crs(lonlat_regions)
    engine.plot_geo_data_frame(fig, naive_regions)
    engine.plot_choropleth(fig, naive_regions, "rate")
    naive_points = without_crs(points_frame(points_table))
    engine.plot_points(fig, naive_points)
    assert [t.type for t in fig.data] == ["scattergeo", "choropleth", "scattergeo"]
    assert max(v for v in fig.data[0].lon if v is not None) == pytest.approx(20.0)
    assert fig.data[2].lat[0] == pytest.approx(-33.9)


def test_basemap_after_features(engine, fig, lonlat_regions):
    engine.plot_geo_data_frame(fig, lonlat_regions, facecolor="lightgrey", edgecolor="black")
    engine.plot_choropleth(fig, lonlat_regions, "rate", hover="name")
    engine.add_basemap(fig, "open-street-map", extent=(0, 20, 0, 20))

    assert [t.type for t in fig.data] == ["scattermap", "choroplethmap"]
    outline, regions = fig.data
    assert outline.fill == "toself"
    assert outline.line.color == "black"
    assert len(outline.lon) == 17
    assert list(regions.z) == [1.5, 3.0, 4.5]
    assert list(regions.text) == ["north", "south", "east"]
    assert fig.layout.map.style == "open-street-map"
    assert fig.layout.geo.projection.type is None

    # later traces go straight onto the tile map
    engine.plot_geo_data_frame(fig, lonlat_regions)
    assert fig.data[2].type == "scattermap"


def test_stepped_colorscale():
    scale = _stepped_colorscale("tab10", 2)
    assert scale == [
        [0.0, "#1f77b4"],
        [0.5, "#1f77b4"],
        [0.5, "#ff7f0e"],
        [1.0, "#ff7f0e"],
    ]
