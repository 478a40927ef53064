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
Cartograms: maps whose region sizes encode a numeric variable instead of land area.

Three published constructions are provided:

* :func:`cartogram_cont` -- contiguous cartogram, the rubber-sheet algorithm of
  Dougenik, Chrisman & Niemeyer (1985), "An Algorithm to Construct Continuous Area Cartograms".
* :func:`cartogram_ncont` -- non-contiguous cartogram (Olson 1976). Every region is shrunk about its centroid.
* :func:`cartogram_dorling` -- Dorling (1996) cartogram. Every region becomes a circle
  and overlapping circles are pushed apart.

All functions need a projected CRS, because areas measured in squared degrees are meaningless.
"""

import logging

import geopandas as gpd
import numpy as np
import shapely
from scipy.spatial import cKDTree
from shapely import affinity
from shapely.geometry import MultiPolygon, Point

from .exceptions import CartogramError, MissingColumn
from .geometry import polygon_parts

logger = logging.getLogger("cartoplot")


def _check_input(gdf, weight):
    if not isinstance(gdf, gpd.GeoDataFrame):
        raise TypeError(f"Expecting a GeoDataFrame, but got {type(gdf)}.")
    if weight not in gdf.columns:
        raise MissingColumn(weight, gdf.columns)
    if len(gdf) == 0:
        raise CartogramError("the GeoDataFrame is empty.")
    if gdf.crs is None:
        logger.warning(
            "The GeoDataFrame has no CRS. Assume the coordinates are already projected."
        )
    elif gdf.crs.is_geographic:
        raise CartogramError(
            f"the CRS ({gdf.crs.to_string()}) is geographic. Reproject the data first, e.g. gdf.to_crs(3857)."
        )
    geom_types = set(gdf.geometry.geom_type.dropna().unique())
    if not geom_types <= {"Polygon", "MultiPolygon"}:
        raise CartogramError(
            f"only Polygon and MultiPolygon geometries are supported, got {sorted(geom_types)}."
        )

    values = np.asarray(gdf[weight], dtype=float)
    if np.isnan(values).any():
        raise ValueError(f"The weight column {weight!r} contains NaN values.")
    if (values < 0).any():
        raise ValueError(f"The weight column {weight!r} contains negative values.")
    return values


def _has_geometry(gdf):
    """Boolean mask of the rows with a non-empty geometry."""
    geoms = gdf.geometry
    return ~(geoms.isna() | geoms.is_empty).to_numpy()


def cartogram_cont(
    gdf, weight, itermax=15, max_size_error=1.0001, prepare="adjust", threshold=0.05
):
    """Build a contiguous cartogram with the Dougenik rubber-sheet algorithm.

    Every vertex is pushed away from (or pulled towards) every region centroid by a force
    that depends on how much that region must grow or shrink. Vertices shared by
    neighbouring regions receive the same displacement, so the regions stay contiguous.

    Parameters
    ----------
    gdf : geopandas.GeoDataFrame
        Polygons in a projected CRS.
    weight : str
        Column with the non-negative values to be encoded by area.
    itermax : int, default=15
        Maximum number of iterations.
    max_size_error : float, default=1.0001
        Stop when the mean ratio between the desired and the current areas falls below this value.
    prepare : {"adjust", "none"}, default="adjust"
        "adjust" raises weights below ``threshold * median`` to that floor, so that tiny
        regions do not collapse to a point.
    threshold : float, default=0.05

    Returns
    -------
    geopandas.GeoDataFrame
        A copy of ``gdf`` with distorted geometries. Rows without a geometry are kept unchanged.
    """
    values = _check_input(gdf, weight)
    if prepare not in ("adjust", "none"):
        raise ValueError(f"prepare must be 'adjust' or 'none', got {prepare!r}.")
    valid = _has_geometry(gdf)
    if not valid.any():
        raise CartogramError("no region has a geometry.")
    values = values[valid]
    if prepare == "adjust":
        floor = threshold * np.median(values)
        adjusted = values < floor
        if adjusted.any():
            logger.info(
                f"{int(adjusted.sum())} weight(s) below {floor:g} have been raised to {floor:g}."
            )
        values = np.maximum(values, floor)
    if values.sum() <= 0:
        raise CartogramError(f"the weights in {weight!r} sum to zero.")

    all_geoms = np.asarray(gdf.geometry.values, dtype=object)
    geoms = all_geoms[valid]

    for iteration in range(itermax):
        areas = shapely.area(geoms)
        centroids = shapely.get_coordinates(shapely.centroid(geoms))
        desired = values / values.sum() * areas.sum()
        radius = np.sqrt(areas / np.pi)
        mass = np.sqrt(desired / np.pi) - radius
        with np.errstate(divide="ignore", invalid="ignore"):
            size_error = np.maximum(desired, areas) / np.minimum(desired, areas)
        mean_size_error = float(np.mean(size_error))
        logger.debug(
            f"cartogram_cont iteration {iteration}: mean size error {mean_size_error:.6f}"
        )
        if mean_size_error < max_size_error:
            break
        force_reduction_factor = 1.0 / (1.0 + mean_size_error)

        def displace(coords):
            delta = coords[:, None, :] - centroids[None, :, :]
            dist = np.hypot(delta[..., 0], delta[..., 1])
            with np.errstate(divide="ignore", invalid="ignore"):
                ratio = dist / radius[None, :]
                force = np.where(
                    dist > radius[None, :],
                    mass[None, :] * radius[None, :] / dist,
                    mass[None, :] * ratio**2 * (4.0 - 3.0 * ratio),
                )
                unit = delta / dist[..., None]
            contribution = np.where(
                (dist > 0)[..., None], force[..., None] * unit, 0.0
            )
            contribution = np.nan_to_num(contribution)
            return coords + force_reduction_factor * contribution.sum(axis=1)

        geoms = shapely.transform(geoms, displace)

    all_geoms = all_geoms.copy()
    all_geoms[valid] = geoms
    result = gdf.copy()
    result = result.set_geometry(
        gpd.GeoSeries(all_geoms, index=result.index, crs=gdf.crs, name=gdf.geometry.name)
    )
    return result


def cartogram_ncont(gdf, weight, k=1.0, inplace=True):
    """Build a non-contiguous cartogram.

    Every region is scaled about its centroid by ``sqrt(density / reference_density) * k``,
    where density is weight per unit area and the reference is the largest density.
    The densest region therefore keeps its size when ``k=1``.

    Parameters
    ----------
    gdf : geopandas.GeoDataFrame
        Polygons in a projected CRS.
    weight : str
        Column with the non-negative values to be encoded by area.
    k : float, default=1.0
        Extra scale factor applied to all regions.
    inplace : bool, default=True
        If True, every polygon of a MultiPolygon is scaled about its own centroid, so islands
        stay where they are. If False, the feature is scaled as a whole about its centroid.

    Returns
    -------
    geopandas.GeoDataFrame
    """
    values = _check_input(gdf, weight)
    if k <= 0:
        raise ValueError(f"k must be positive, got {k}.")

    areas = gdf.geometry.area.to_numpy()
    with np.errstate(divide="ignore", invalid="ignore"):
        density = np.where(areas > 0, values / areas, 0.0)
    reference = density.max()
    if reference <= 0:
        raise CartogramError(f"the weights in {weight!r} are all zero.")
    factors = np.sqrt(density / reference) * k

    scaled = []
    for geom, factor in zip(gdf.geometry, factors):
        if geom is None or geom.is_empty:
            scaled.append(geom)
            continue
        if inplace and isinstance(geom, MultiPolygon):
            scaled.append(
                MultiPolygon(
                    [
                        affinity.scale(part, factor, factor, origin="centroid")
                        for part in polygon_parts(geom)
                    ]
                )
            )
        else:
            scaled.append(affinity.scale(geom, factor, factor, origin="centroid"))

    result = gdf.copy()
    result = result.set_geometry(
        gpd.GeoSeries(scaled, index=gdf.index, crs=gdf.crs, name=gdf.geometry.name)
    )
    return result


def cartogram_dorling(gdf, weight, k=5.0, m_weight=1.0, itermax=1000):
    """Build a Dorling cartogram: one circle per region, with area proportional to the weight.

    Circles start at the region centroids. Overlapping circles are pushed apart, and circles
    that do not overlap are pulled back towards their starting point with strength ``m_weight``.
    Regions with a zero weight or without a geometry are dropped.

    Parameters
    ----------
    gdf : geopandas.GeoDataFrame
        Polygons in a projected CRS.
    weight : str
        Column with the non-negative values to be encoded by area.
    k : float, default=5.0
        Share (in percent) of the bounding box of ``gdf`` covered by the largest circle.
    m_weight : float, default=1.0
        Attraction towards the original centroid, between 0 (none) and 1.
    itermax : int, default=1000

    Returns
    -------
    geopandas.GeoDataFrame
        Circular polygons, one per region with a positive weight.
    """
    values = _check_input(gdf, weight)
    if k <= 0:
        raise ValueError(f"k must be positive, got {k}.")
    if not 0.0 <= m_weight <= 1.0:
        raise ValueError(f"m_weight must be between 0 and 1, got {m_weight}.")

    has_geometry = _has_geometry(gdf)
    if not has_geometry.all():
        logger.warning(
            f"{int((~has_geometry).sum())} region(s) without a geometry have been removed."
        )
    positive = values > 0
    if not (positive & has_geometry).any():
        raise CartogramError(f"the weights in {weight!r} are all zero.")
    if not positive[has_geometry].all():
        logger.warning(
            f"{int((~positive[has_geometry]).sum())} region(s) with zero {weight!r} have been removed."
        )
    keep = positive & has_geometry
    result = gdf.loc[keep].copy()
    values = values[keep]

    minx, miny, maxx, maxy = gdf.total_bounds
    surface = (maxx - minx) * (maxy - miny)
    if surface <= 0:
        raise CartogramError("the bounding box of the data has no area.")
    circle_areas = values / values.max() * surface * k / 100.0
    radii = np.sqrt(circle_areas / np.pi)

    origin = shapely.get_coordinates(shapely.centroid(result.geometry.values))
    positions = _separate_circles(origin, radii, m_weight, itermax)

    circles = [Point(x, y).buffer(r) for (x, y), r in zip(positions, radii)]
    result = result.set_geometry(
        gpd.GeoSeries(circles, index=result.index, crs=gdf.crs, name=gdf.geometry.name)
    )
    return result


def _separate_circles(origin, radii, m_weight, itermax, tolerance=1e-9):
    positions = origin.astype(float).copy()
    search_radius = 2.0 * radii.max()
    scale = radii.max()

    for iteration in range(itermax):
        pairs = cKDTree(positions).query_pairs(search_radius, output_type="ndarray")
        push = np.zeros_like(positions)
        overlapping = np.zeros(len(positions), dtype=bool)
        if len(pairs):
            i, j = pairs[:, 0], pairs[:, 1]
            delta = positions[j] - positions[i]
            dist = np.hypot(delta[:, 0], delta[:, 1])
            overlap = radii[i] + radii[j] - dist
            hit = overlap > tolerance * scale
            if hit.any():
                i, j, delta, dist, overlap = (
                    i[hit],
                    j[hit],
                    delta[hit],
                    dist[hit],
                    overlap[hit],
                )
                # coincident centres are separated along the x axis
                unit = np.where(
                    (dist > 0)[:, None],
                    delta / np.where(dist > 0, dist, 1.0)[:, None],
                    np.array([1.0, 0.0]),
                )
                # the smaller circle moves further
                share_i = radii[j] / (radii[i] + radii[j])
                share_j = 1.0 - share_i
                np.add.at(push, i, -unit * (overlap * share_i)[:, None])
                np.add.at(push, j, unit * (overlap * share_j)[:, None])
                overlapping[i] = True
                overlapping[j] = True

        if not overlapping.any():
            logger.debug(f"cartogram_dorling converged after {iteration} iteration(s).")
            return positions

        positions += push
        free = ~overlapping
        positions[free] += (origin[free] - positions[free]) * m_weight * 0.5

    logger.warning(
        f"cartogram_dorling did not remove all overlaps within {itermax} iterations."
    )
    return positions
