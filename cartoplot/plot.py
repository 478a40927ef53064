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
This sub-module contains the :class:`MapPlot` class, the entry point for drawing maps.

:class:`MapPlot` turns user data (tables with longitude/latitude columns, GeoDataFrames,
vector files and TopoJSON files) into `geopandas.GeoDataFrame`_ objects and hands them to a
plot engine: :class:`CartopyPlotEngine` for static maps or :class:`PlotlyPlotEngine` for
interactive maps.

Classes
-------
MapPlot

.. _geopandas.GeoDataFrame: https://geopandas.org/en/stable/docs/reference/api/geopandas.GeoDataFrame.html
"""

import logging
import os

import geopandas as gpd
import pandas as pd

from .basemaps import DEFAULT_MAP_STYLE
from .cartogram import cartogram_cont, cartogram_dorling, cartogram_ncont
from .colors import assign_bins, classify
from .decorators import (
    append_docstring,
    ignore_transform,
    skip_empty,
    validate_geo_data_frame,
)
from .exceptions import MissingColumn
from .geometry import ensure_geo_data_frame, points_frame
from .mapping.cartopy_plot import CartopyPlotEngine
from .mapping.plot_engine import PlotEngine
from .projections import resolve_projection
from .topojson import is_topojson, read_topojson
from .utils.plot_utils import is_numeric_column

logger = logging.getLogger("cartoplot")

CARTOGRAM_METHODS = {
    "cont": cartogram_cont,
    "ncont": cartogram_ncont,
    "dorling": cartogram_dorling,
}

_CARTOGRAM_KWARGS = (
    "itermax",
    "max_size_error",
    "prepare",
    "threshold",
    "k",
    "inplace",
    "m_weight",
)

PLOT_DOCSTRING = """

Parameters
----------
ax :
    Cartopy GeoAxes or plotly Figure, as returned by :meth:`MapPlot.new_map`.

split : None, True or str, default=None
    Draw one trace (plotly) or one labelled artist (Cartopy) per distinct value of this column,
    or per row if ``True``. Separate traces can be styled, hovered and toggled in the legend
    one by one.

**kwargs :
    `Matplotlib keyword arguments <https://matplotlib.org/stable/api/_as_gen/matplotlib.pyplot.plot.html>`__ or plotly trace properties

"""


class MapPlot(object):
    """Draw points, simple features, choropleths and cartograms onto maps.

    To create the :class:`MapPlot` object, supply optionally:

    * a map projection (name, :class:`ProjectionSpec` or Cartopy CRS)
    * a plot engine

    For example:

    .. code-block:: python
        :linenos:

        import cartoplot

        mp = cartoplot.MapPlot(projection="robinson")
        ax = mp.new_map()
        mp.plot_features(ax, "countries.topojson", color="grey")
        mp.plot_points(ax, quakes, lon="longitude", lat="latitude", color="magnitude")

        # interactive version
        mp = cartoplot.MapPlot(projection="orthographic", plot_engine=cartoplot.PlotlyPlotEngine())
        fig = mp.new_map()
        mp.plot_choropleth(fig, population, color="pop", regions=states, locations="state", region_key="name")
        fig.show()
    """

    def __init__(self, projection=None, plot_engine: PlotEngine = CartopyPlotEngine()):
        """Constructor. Create a :class:`MapPlot` object.

        Parameters
        ----------
        projection : str, ProjectionSpec or cartopy.crs.Projection, default=None
            The map projection. ``None`` means equirectangular.
        plot_engine : :class:`PlotEngine`, default=CartopyPlotEngine()
            Use Cartopy (:class:`CartopyPlotEngine`) or plotly (:class:`PlotlyPlotEngine`) to plot the map.
        """
        self._plot_engine = plot_engine
        self.projection = projection

    @property
    def projection(self):
        """The map projection used by :meth:`new_map`.

        :type: ProjectionSpec or cartopy.crs.CRS
        """
        return self._projection

    @projection.setter
    def projection(self, projection):
        self._projection = resolve_projection(projection)

    @property
    def plot_engine(self):
        return self._plot_engine

    def new_map(self, **kwargs):
        """Create a new map with the current projection: a Cartopy GeoAxes or a plotly Figure,
        depending on the plot engine. Keyword arguments are passed to the plot engine."""
        return self._plot_engine.new_map(projection=self._projection, **kwargs)

    def get_points(self, data, lon="lon", lat="lat"):
        """Return the points in ``data`` as a `geopandas.GeoDataFrame`_.

        Parameters
        ----------
        data : pandas.DataFrame or geopandas.GeoDataFrame
            A table with longitude/latitude columns, or a GeoDataFrame of points.
        lon, lat : str
            Names of the longitude and latitude columns. Ignored for GeoDataFrames.
        """
        if isinstance(data, gpd.GeoDataFrame):
            return ensure_geo_data_frame(data)
        if isinstance(data, pd.DataFrame):
            return points_frame(data, lon=lon, lat=lat)
        return ensure_geo_data_frame(data)

    def get_features(self, data, object_name=None):
        """Return simple features as a `geopandas.GeoDataFrame`_.

        Parameters
        ----------
        data : str, os.PathLike, geopandas.GeoDataFrame, geopandas.GeoSeries or shapely geometries
            A path is read with `geopandas.read_file`, or with :func:`read_topojson` for TopoJSON files.
        object_name : str, optional
            The TopoJSON object to read.
        """
        if isinstance(data, (str, os.PathLike)):
            if is_topojson(data):
                return read_topojson(data, object_name=object_name)
            return ensure_geo_data_frame(gpd.read_file(data))
        return ensure_geo_data_frame(data)

    @ignore_transform
    @append_docstring(PLOT_DOCSTRING)
    def plot_points(
        self,
        ax,
        data,
        lon="lon",
        lat="lat",
        color=None,
        size=None,
        split=None,
        hover=None,
        basemap=None,
        **kwargs,
    ):
        """Plot points (a scatter) onto a map.

        ``data`` is a table with longitude/latitude columns named by ``lon`` and ``lat``, or a
        GeoDataFrame of points. ``color`` and ``size`` are column names or literal values.
        ``hover`` names the column(s) shown when hovering (plotly only). ``basemap`` draws a tile
        basemap first, see :func:`cartoplot.basemaps.available_basemaps`."""
        return self._plot_points(
            ax,
            self.get_points(data, lon=lon, lat=lat),
            color=color,
            size=size,
            split=split,
            hover=hover,
            basemap=basemap,
            **kwargs,
        )

    @skip_empty("points")
    def _plot_points(self, ax, gdf, **kwargs):
        return self._plot_engine.plot_points(ax, gdf, **kwargs)

    def plot_basemap(self, ax, style=DEFAULT_MAP_STYLE, zoom=None, extent=None):
        """Draw a tile basemap (street map, satellite imagery, etc.) behind the data.

        Parameters
        ----------
        style : str, default="open-street-map"
            See :func:`cartoplot.basemaps.available_basemaps`.
        zoom : int, optional
            Tile zoom level.
        extent : tuple, optional
            (min_lon, max_lon, min_lat, max_lat) to zoom the map to.
        """
        return self._plot_engine.add_basemap(ax, style, zoom=zoom, extent=extent)

    @ignore_transform
    @append_docstring(PLOT_DOCSTRING)
    def plot_features(self, ax, data, color=None, split=None, object_name=None, **kwargs):
        """Plot simple features (points, lines and polygons) onto a map.

        ``data`` is anything :meth:`get_features` accepts. ``color`` is the edge colour of the
        geometries. It defaults to black unless ``split`` is given, in which case every group
        gets its own colour. Polygons are not filled unless ``facecolor`` is given."""
        if color is not None:
            kwargs.setdefault("edgecolor", color)
        elif split is None:
            kwargs.setdefault("edgecolor", "black")
        kwargs.setdefault("facecolor", "none")
        return self._plot_features(
            ax, self.get_features(data, object_name=object_name), split=split, **kwargs
        )

    @validate_geo_data_frame
    @skip_empty("features")
    def _plot_features(self, ax, gdf, **kwargs):
        return self._plot_engine.plot_geo_data_frame(ax, gdf, **kwargs)

    def get_choropleth_data(
        self, data, color, regions=None, locations=None, region_key="id"
    ):
        """Return a `geopandas.GeoDataFrame`_ holding the region geometries and the ``color`` column.

        Parameters
        ----------
        data : geopandas.GeoDataFrame or pandas.DataFrame
            Regions with the variable, or (with ``regions``) a plain table of region identifiers and the variable.
        color : str
            The numeric (or categorical) column.
        regions : optional
            Region geometries, anything :meth:`get_features` accepts.
        locations : str, optional
            The column of ``data`` with region identifiers. Required with ``regions``.
        region_key : str, default="id"
            The column of ``regions`` matched against ``locations``. Identifiers are compared as strings.
        """
        if regions is None:
            if isinstance(data, pd.DataFrame) and not isinstance(data, gpd.GeoDataFrame):
                raise ValueError(
                    "A plain table has no geometries. Pass the region geometries with 'regions' "
                    "and the column of region identifiers with 'locations'."
                )
            gdf = ensure_geo_data_frame(data)
        else:
            if locations is None:
                raise ValueError(
                    "The 'locations' parameter is required to join the data to the regions."
                )
            if locations not in data.columns:
                raise MissingColumn(locations, data.columns)
            regions = self.get_features(regions)
            if region_key not in regions.columns:
                raise MissingColumn(region_key, regions.columns)

            region_ids = regions[region_key].astype(str)
            data_ids = data[locations].astype(str)
            unmatched = sorted(set(data_ids) - set(region_ids))
            if unmatched:
                logger.warning(
                    f"{len(unmatched)} identifier(s) in {locations!r} match no region and are dropped, "
                    f"e.g. {unmatched[:5]}."
                )
            if isinstance(data, gpd.GeoDataFrame):
                table = pd.DataFrame(data.drop(columns=data.geometry.name))
            else:
                table = pd.DataFrame(data)
            gdf = regions.assign(_key=region_ids).merge(
                table.assign(_key=data_ids), on="_key", how="inner", suffixes=("_region", "")
            )
            gdf = gdf.drop(columns=["_key"])
            if len(gdf) == 0:
                raise ValueError(
                    f"None of the identifiers in {locations!r} match the {region_key!r} of the regions."
                )

        if color not in gdf.columns:
            raise MissingColumn(color, gdf.columns)
        if not (
            is_numeric_column(gdf, color)
            or isinstance(gdf[color].dtype, pd.CategoricalDtype)
        ):
            raise TypeError(
                f"The colour column {color!r} must be numeric or categorical, but it is {gdf[color].dtype}."
            )
        return gdf

    @ignore_transform
    def plot_choropleth(
        self,
        ax,
        data,
        color,
        regions=None,
        locations=None,
        region_key="id",
        cmap="viridis",
        scheme=None,
        k=5,
        **kwargs,
    ):
        """Plot a choropleth: regions coloured according to a numeric variable.

        Parameters
        ----------
        ax :
            Cartopy GeoAxes or plotly Figure, as returned by :meth:`new_map`.
        data, color, regions, locations, region_key :
            See :meth:`get_choropleth_data`.
        cmap : str, default="viridis"
            A matplotlib colormap (or a plotly colorscale with the plotly engine).
        scheme : {None, "quantiles", "equal_interval", "jenks"}
            Bin the values into ``k`` classes before colouring.
        k : int, default=5
        **kwargs :
            passed to the plot engine
        """
        gdf = self.get_choropleth_data(
            data, color, regions=regions, locations=locations, region_key=region_key
        )
        if scheme is not None:
            edges = classify(gdf[color], k=k, scheme=scheme)
            logger.debug(f"{scheme} class edges of {color!r}: {edges}")
            binned = f"{color} ({scheme})"
            gdf = gdf.assign(**{binned: assign_bins(gdf[color], edges)})
            color = binned
        return self._plot_choropleth(ax, gdf, color, cmap=cmap, **kwargs)

    @skip_empty("regions")
    def _plot_choropleth(self, ax, gdf, color, **kwargs):
        return self._plot_engine.plot_choropleth(ax, gdf, color, **kwargs)

    def get_cartogram(self, data, weight, method="cont", crs=None, **kwargs):
        """Return a cartogram of ``data`` as a `geopandas.GeoDataFrame`_.

        Parameters
        ----------
        data :
            Region polygons, anything :meth:`get_features` accepts.
        weight : str
            The column encoded by area.
        method : {"cont", "ncont", "dorling"}, default="cont"
            Contiguous, non-contiguous or Dorling cartogram.
        crs : optional
            A projected CRS to reproject ``data`` to first. Required if ``data`` is in longitude/latitude.
        **kwargs :
            passed to :func:`cartogram_cont`, :func:`cartogram_ncont` or :func:`cartogram_dorling`
        """
        if method not in CARTOGRAM_METHODS:
            raise ValueError(
                f"Unknown cartogram method {method!r}. Valid methods are: {', '.join(CARTOGRAM_METHODS)}."
            )
        if isinstance(data, gpd.GeoDataFrame):
            # a frame without a CRS is left as is, the cartogram functions assume projected coordinates
            gdf = data
        else:
            gdf = self.get_features(data)
        if crs is not None:
            gdf = gdf.to_crs(crs)
        return CARTOGRAM_METHODS[method](gdf, weight, **kwargs)

    @ignore_transform
    def plot_cartogram(
        self, ax, data, weight, method="cont", crs=None, cmap="viridis", **kwargs
    ):
        """Compute a cartogram with :meth:`get_cartogram` and plot it as a choropleth of ``weight``.

        Keyword arguments understood by the cartogram functions (``itermax``, ``k``, ``m_weight``, etc.)
        go to :meth:`get_cartogram`, the rest to :meth:`plot_choropleth`.
        """
        cartogram_kwargs = {
            key: kwargs.pop(key) for key in _CARTOGRAM_KWARGS if key in kwargs
        }
        gdf = self.get_cartogram(data, weight, method=method, crs=crs, **cartogram_kwargs)
        return self.plot_choropleth(ax, gdf, weight, cmap=cmap, **kwargs)
