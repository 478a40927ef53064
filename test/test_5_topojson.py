import json

import geopandas as gpd
import pytest
from shapely.geometry import LineString, MultiPoint, Point, Polygon

from cartoplot.exceptions import InvalidTopoJSON
from cartoplot.topojson import (
    decode_arcs,
    is_topojson,
    load_topology,
    read_topojson,
    topology_objects,
)

# ========================================= <cartoplot.topojson> =========================================

"""
The test topology (see conftest.py) holds two unit squares that share one arc, a road with a
null geometry next to it, and two cities. Quantised positions are decoded with x * 0.5 + 100
and y * 0.5 + 10.
"""


def test_load_topology_sources(topology, tmp_path):
    text = json.dumps(topology)
    assert load_topology(topology) is topology
    assert load_topology(text) == topology
    assert load_topology(text.encode("utf-8")) == topology

    path = tmp_path / "test.topojson"
    path.write_text(text)
    assert load_topology(path) == topology
    assert load_topology(str(path)) == topology


def test_invalid_topologies():
    with pytest.raises(InvalidTopoJSON):
        load_topology({"type": "FeatureCollection", "features": []})
    with pytest.raises(InvalidTopoJSON):
        load_topology({"type": "Topology", "arcs": []})
    with pytest.raises(InvalidTopoJSON):
        load_topology("{not json")
    with pytest.raises(TypeError):
        load_topology(42)


def test_is_topojson(topology, tmp_path):
    topo_path = tmp_path / "atlas.json"
    topo_path.write_text(json.dumps(topology))
    geojson_path = tmp_path / "features.json"
    geojson_path.write_text(json.dumps({"type": "FeatureCollection", "features": []}))

    assert is_topojson(topo_path)
    assert not is_topojson(geojson_path)
    assert is_topojson("whatever.topojson")
    assert not is_topojson("regions.gpkg")


def test_topology_objects(topology):
    assert topology_objects(topology) == ["regions", "roads", "cities"]


def test_decode_arcs(topology):
    arcs = decode_arcs(topology)
    assert arcs[0] == [(101.0, 10.0), (101.0, 11.0)]
    assert arcs[3] == [(100.0, 12.0), (102.0, 12.0)]


def test_decode_arcs_without_transform():
    topology = {
        "type": "Topology",
        "objects": {},
        "arcs": [[[1.5, 2.5], [3.5, 4.5]]],
    }
    assert decode_arcs(topology) == [[(1.5, 2.5), (3.5, 4.5)]]


def test_read_polygons(topology):
    gdf = read_topojson(topology, object_name="regions")
    assert isinstance(gdf, gpd.GeoDataFrame)
    assert gdf.crs.to_epsg() == 4326
    assert list(gdf.columns) == ["id", "name", "pop", "geometry"]
    assert list(gdf["id"]) == ["L", "R"]
    assert list(gdf["pop"]) == [10, 30]

    left, right = gdf.geometry
    assert isinstance(left, Polygon)
    assert left.bounds == (100.0, 10.0, 101.0, 11.0)
    assert right.bounds == (101.0, 10.0, 102.0, 11.0)
    assert left.area == pytest.approx(1.0)
    # the reversed shared arc closes the right square
    assert right.area == pytest.approx(1.0)
    assert left.intersection(right).length == pytest.approx(1.0)


def test_read_lines_and_null_geometry(topology):
    gdf = read_topojson(topology, object_name="roads")
    assert "id" not in gdf.columns
    assert list(gdf["kind"]) == ["road", "road"]
    assert list(gdf["name"]) == ["main", "missing"]
    assert gdf.geometry.iloc[0].equals(LineString([(100, 12), (102, 12)]))
    assert gdf.geometry.iloc[1] is None


def test_read_points(topology):
    gdf = read_topojson(topology, object_name="cities")
    assert gdf.geometry.iloc[0].equals(Point(101, 11))
    assert gdf.geometry.iloc[1].equals(MultiPoint([(100, 10), (102, 12)]))


def test_object_selection(topology):
    with pytest.raises(InvalidTopoJSON, match="choose one of"):
        read_topojson(topology)
    with pytest.raises(InvalidTopoJSON, match="not found"):
        read_topojson(topology, object_name="rivers")

    single = dict(topology, objects={"roads": topology["objects"]["roads"]})
    assert len(read_topojson(single)) == 2


def test_bad_arc_index(topology):
    topology["objects"]["regions"]["geometries"][0]["arcs"] = [[0, 9]]
    with pytest.raises(InvalidTopoJSON, match="out of range"):
        read_topojson(topology, object_name="regions")
