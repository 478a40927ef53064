import copy

import matplotlib

matplotlib.use("Agg")

import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import box

## ==========================

# Every fixture is small and synthetic. No test touches the network.
PROJECTED_CRS = "EPSG:3857"
GEOGRAPHIC_CRS = "EPSG:4326"

# two 1 km squares sharing the edge x=1000
square_a = box(0, 0, 1000, 1000)
square_b = box(1000, 0, 2000, 1000)

# a quantised topology: two squares sharing one arc, a road and a city
# decoded with x * 0.5 + 100 and y * 0.5 + 10
test_topology = {
    "type": "Topology",
    "transform": {"scale": [0.5, 0.5], "translate": [100, 10]},
    "objects": {
        "regions": {
            "type": "GeometryCollection",
            "geometries": [
                {
                    "type": "Polygon",
                    "arcs": [[0, 1]],
                    "id": "L",
                    "properties": {"name": "left", "pop": 10},
                },
                {
                    "type": "Polygon",
                    "arcs": [[2, -1]],
                    "id": "R",
                    "properties": {"name": "right", "pop": 30},
                },
            ],
        },
        "roads": {
            "type": "GeometryCollection",
            "properties": {"kind": "road"},
            "geometries": [
                {"type": "LineString", "arcs": [3], "properties": {"name": "main"}},
                {"type": None, "properties": {"name": "missing"}},
            ],
        },
        "cities": {
            "type": "GeometryCollection",
            "geometries": [
                {"type": "Point", "coordinates": [2, 2], "properties": {"name": "c"}},
                {"type": "MultiPoint", "coordinates": [[0, 0], [4, 4]], "properties": {"name": "m"}},
            ],
        },
    },
    "arcs": [
        [[2, 0], [0, 2]],
        [[2, 2], [-2, 0], [0, -2], [2, 0]],
        [[2, 0], [2, 0], [0, 2], [-2, 0]],
        [[0, 4], [4, 0]],
    ],
}


@pytest.fixture
def projected_squares():
    return gpd.GeoDataFrame(
        {"name": ["a", "b"], "weight": [1.0, 3.0]},
        geometry=[square_a, square_b],
        crs=PROJECTED_CRS,
    )


@pytest.fixture
def lonlat_regions():
    return gpd.GeoDataFrame(
        {
            "id": ["01", "02", "03"],
            "name": ["north", "south", "east"],
            "rate": [1.5, 3.0, 4.5],
        },
        geometry=[box(0, 10, 10, 20), box(0, 0, 10, 10), box(10, 0, 20, 20)],
        crs=GEOGRAPHIC_CRS,
    )


@pytest.fixture
def points_table():
    return pd.DataFrame(
        {
            "lon": [151.2, 144.9, 153.0, 115.8],
            "lat": [-33.9, -37.8, -27.5, -31.9],
            "mag": [4.5, 5.1, 6.2, 3.9],
            "kind": ["quake", "quake", "blast", "quake"],
            "place": ["Sydney", "Melbourne", "Brisbane", "Perth"],
        }
    )


@pytest.fixture
def topology():
    return copy.deepcopy(test_topology)


def without_crs(gdf):
    """the same frame with naive geometries"""
    return gpd.GeoDataFrame(
        pd.DataFrame(gdf.drop(columns=gdf.geometry.name)), geometry=list(gdf.geometry)
    )
