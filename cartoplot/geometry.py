#
#    Copyright (C) 2024-2025 The University of Sydney, Australia
#
#    This program is free software; you can redistribute it and/or modify it under
#    the terms of the GNU General Public License, version 2, as published by
#    the Free Software Foundation.
#
#    This program is distributed in the hope that it will be useful, but WITHOUT
#    ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or
#    FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General Public License
#    for more details.
#
#    You should have received a copy of the GNU General Public License along
#    with this program; if not, write to Free Software Foundation, Inc.,
#    51 Franklin Street, Fifth Floor, Boston, MA  02110-1301, USA.
#

"""
Simple-features helpers.

Functions in this module turn tabular data into `geopandas.GeoDataFrame`_ objects and
turn shapely geometries into the flat coordinate lists that plotly traces expect.
Plotly draws one continuous path per trace unless the coordinates contain ``None``,
which breaks the path. Multi-part geometries and multiple rows are therefore joined with ``None``.

.. _geopandas.GeoDataFrame: https://geopandas.org/en/stable/docs/reference/api/geopandas.GeoDataFrame.html
"""

import logging

import geopandas as gpd
import numpy as np
import pandas as pd
from shapely.geometry import (
    LinearRing,
    LineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)
from shapely.geometry.base import BaseGeometry, BaseMultipartGeometry

from .exceptions import MissingColumn, MissingGeometryColumn

logger = logging.getLogger("cartoplot")

DEFAULT_CRS = "EPSG:4326"

_POINT_TYPES = ("Point", "MultiPoint")
_LINE_TYPES = ("LineString", "MultiLineString", "LinearRing")
_POLYGON_TYPES = ("Polygon", "MultiPolygon")


def points_frame(data, lon="lon", lat="lat", crs=DEFAULT_CRS):
    """Build a point `geopandas.GeoDataFrame`_ from a table with longitude and latitude columns.

    Parameters
    ----------
    data : pandas.DataFrame
        The table. All columns are kept.
    lon, lat : str
        Names of the longitude and latitude columns.
    crs : str, default="EPSG:4326"
        The coordinate reference system of the longitude/latitude values.

    Returns
    -------
    geopandas.GeoDataFrame
    """
    for column in (lon, lat):
        if column not in data.columns:
            raise MissingColumn(column, data.columns)
    return gpd.GeoDataFrame(
        data.copy(),
        geometry=gpd.points_from_xy(data[lon], data[lat]),
        crs=crs,
    )


def ensure_geo_data_frame(data):
    """Return ``data`` as a `geopandas.GeoDataFrame`_ with a CRS.

    A GeoDataFrame without a CRS is assumed to hold longitude/latitude (EPSG:4326).
    """
    if isinstance(data, gpd.GeoDataFrame):
        try:
            data.geometry
        except AttributeError:
            raise MissingGeometryColumn(type(data))
        gdf = data
    elif isinstance(data, gpd.GeoSeries):
        gdf = gpd.GeoDataFrame(geometry=data, crs=data.crs)
    elif isinstance(data, BaseGeometry):
        gdf = gpd.GeoDataFrame(geometry=[data])
    elif isinstance(data, pd.DataFrame):
        raise MissingGeometryColumn(type(data))
    elif isinstance(data, (list, tuple)) and all(
        isinstance(g, BaseGeometry) for g in data
    ):
        gdf = gpd.GeoDataFrame(geometry=list(data))
    else:
        raise MissingGeometryColumn(type(data))

    if gdf.crs is None:
        logger.debug("The data has no CRS. Assume longitude/latitude (EPSG:4326).")
        gdf = gdf.set_crs(DEFAULT_CRS)
    return gdf


def flatten_multi_geoms(geoms, prefix="Multi"):
    """
    Split any Multi geometries into their components and repeat the row index for
    all components of the same Multi geometry. Maintains 1:1 matching of geometry to value.
    Prefix specifies type of geometry to be flatten. 'Multi' for MultiPoint and similar,
    "Geom" for GeometryCollection.

    Returns
    -------
    components : list of geometry
    component_index : index array
        indices are repeated for all components in the same Multi geometry
    component_type : array of geometry type names
    """
    components, component_index, component_type = [], [], []

    for ix, geom in enumerate(geoms):
        if geom is None:
            continue
        geom_type = geom.geom_type
        if geom_type.startswith(prefix) and not geom.is_empty:
            for part in geom.geoms:
                components.append(part)
                component_index.append(ix)
                component_type.append(part.geom_type)
        else:
            components.append(geom)
            component_index.append(ix)
            component_type.append(geom_type)

    return components, np.array(component_index, dtype=int), np.array(component_type)


def _ring_coords(ring):
    coords = list(ring.coords)
    if coords and coords[0] != coords[-1]:
        coords.append(coords[0])
    return coords


def point_coordinates(gdf):
    """Return x, y and the owning row position of every point in a frame of Point/MultiPoint geometries.

    Empty geometries are skipped, so use the row positions to pick matching values.
    """
    components, component_index, component_type = flatten_multi_geoms(gdf.geometry)
    if len(components) and not np.all(component_type == "Point"):
        raise TypeError(
            f"Expecting Point or MultiPoint geometries, got {sorted(set(component_type))}."
        )
    keep = [i for i, p in enumerate(components) if not p.is_empty]
    x = np.array([components[i].x for i in keep], dtype=float)
    y = np.array([components[i].y for i in keep], dtype=float)
    return x, y, component_index[keep]


def geometry_to_lonlat(geom):
    """Turn a shapely geometry into two flat lists of x (longitude) and y (latitude).

    The parts of multi-part geometries and the rings of polygons are separated by ``None``.
    Empty geometries give two empty lists.

    Parameters
    ----------
    geom : shapely.geometry.base.BaseGeometry

    Returns
    -------
    lons, lats : list
    """
    lons, lats = [], []
    if geom is None or geom.is_empty:
        return lons, lats

    if isinstance(geom, (Point, LineString, LinearRing)):
        coords = _ring_coords(geom) if isinstance(geom, LinearRing) else geom.coords
        for c in coords:
            lons.append(c[0])
            lats.append(c[1])
    elif isinstance(geom, Polygon):
        rings = [geom.exterior] + list(geom.interiors)
        for i, ring in enumerate(rings):
            if i > 0:
                lons.append(None)
                lats.append(None)
            for c in _ring_coords(ring):
                lons.append(c[0])
                lats.append(c[1])
    elif isinstance(geom, MultiPoint):
        for p in geom.geoms:
            lons.append(p.x)
            lats.append(p.y)
    elif isinstance(geom, BaseMultipartGeometry):
        # MultiLineString, MultiPolygon and GeometryCollection
        for i, part in enumerate(geom.geoms):
            if i > 0:
                lons.append(None)
                lats.append(None)
            part_lons, part_lats = geometry_to_lonlat(part)
            lons.extend(part_lons)
            lats.extend(part_lats)
    else:
        raise TypeError(f"Unsupported geometry type: {geom.geom_type}")
    return lons, lats


def frame_to_lonlat(gdf):
    """Concatenate :func:`geometry_to_lonlat` for every row of a GeoDataFrame, rows separated by ``None``."""
    lons, lats = [], []
    for geom in gdf.geometry:
        geom_lons, geom_lats = geometry_to_lonlat(geom)
        if not geom_lons:
            continue
        if lons:
            lons.append(None)
            lats.append(None)
        lons.extend(geom_lons)
        lats.extend(geom_lats)
    return lons, lats


def geometry_kind(gdf):
    """Return "point", "line", "polygon" or "mixed" for the (non-empty) geometries in the frame."""
    types = set(t for t in gdf.geometry.geom_type.dropna().unique())
    if not types:
        return "mixed"
    if types <= set(_POINT_TYPES):
        return "point"
    if types <= set(_LINE_TYPES):
        return "line"
    if types <= set(_POLYGON_TYPES):
        return "polygon"
    return "mixed"


def lonlat_extent(gdf, margin=0.05):
    """Return (min_lon, max_lon, min_lat, max_lat) of the data, padded by ``margin`` of each span."""
    minx, miny, maxx, maxy = gdf.to_crs(DEFAULT_CRS).total_bounds
    dx = max(maxx - minx, 1e-3) * margin
    dy = max(maxy - miny, 1e-3) * margin
    return (
        max(minx - dx, -180.0),
        min(maxx + dx, 180.0),
        max(miny - dy, -90.0),
        min(maxy + dy, 90.0),
    )


def polygon_parts(geom):
    """Return the polygons in a Polygon or MultiPolygon as a list."""
    if isinstance(geom, Polygon):
        return [geom]
    if isinstance(geom, MultiPolygon):
        return list(geom.geoms)
    return []
