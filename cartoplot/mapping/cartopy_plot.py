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
import logging

import cartopy.crs as ccrs
import matplotlib.pyplot as plt
from geopandas.geodataframe import GeoDataFrame

from ..basemaps import (
    DEFAULT_MAP_STYLE,
    DEFAULT_ZOOM,
    get_tile_source,
    normalise_style,
    zoom_for_extent,
)
from ..colors import discrete_colors
from ..exceptions import MissingColumn
from ..geometry import lonlat_extent, point_coordinates
from ..projections import to_cartopy
from ..utils.plot_utils import is_column, is_numeric_column, scale_sizes
from .plot_engine import PlotEngine

logger = logging.getLogger("cartoplot")

DEFAULT_CARTOPY_PROJECTION = ccrs.PlateCarree()


def _reproject(ax_or_fig, gdf: GeoDataFrame):
    if hasattr(ax_or_fig, "projection"):
        if gdf.crs is None:
            gdf = gdf.set_crs(DEFAULT_CARTOPY_PROJECTION)
        return gdf.to_crs(ax_or_fig.projection)
    return gdf


class CartopyPlotEngine(PlotEngine):
    """Use Cartopy for map plotting"""

    def __init__(self):
        pass

    def new_map(self, projection=None, figsize=(10, 5), **kwargs):
        """Create a matplotlib figure with a single Cartopy GeoAxes

        Parameters
        ----------
        projection : str, ProjectionSpec or cartopy.crs.Projection
            See :func:`cartoplot.projections.resolve_projection`.
        figsize : tuple, default=(10, 5)
        **kwargs :
            passed to ``plt.figure``

        Returns
        -------
        cartopy.mpl.geoaxes.GeoAxes
        """
        fig = plt.figure(figsize=figsize, **kwargs)
        return fig.add_subplot(111, projection=to_cartopy(projection))

    def plot_geo_data_frame(self, ax_or_fig, gdf: GeoDataFrame, split=None, **kwargs):
        """Use Cartopy to plot geometries in a GeoDataFrame object onto a map

        Parameters
        ----------
        ax_or_fig : cartopy.mpl.geoaxes.GeoAxes
            Cartopy GeoAxes instance
        gdf : GeoDataFrame
            GeoPandas GeoDataFrame object
        split : None, True or str
            Draw one labelled artist per group, see :meth:`PlotEngine.split_groups`.
            Groups without an explicit colour get one from the "tab10" palette.

        """
        gdf = _reproject(ax_or_fig, gdf)
        if split is None or split is False:
            return gdf.plot(ax=ax_or_fig, **kwargs)
        groups = self.split_groups(gdf, split)

        has_color = any(k in kwargs for k in ("color", "edgecolor"))
        palette = discrete_colors([name for name, _ in groups])
        for name, group in groups:
            group_kwargs = dict(kwargs)
            if not has_color:
                # unfilled polygons take the group colour on their outline
                key = "edgecolor" if "facecolor" in kwargs else "color"
                group_kwargs[key] = palette.get(name, "black")
            group.plot(ax=ax_or_fig, label=str(name), **group_kwargs)
        return ax_or_fig

    def plot_points(
        self,
        ax_or_fig,
        gdf: GeoDataFrame,
        color=None,
        size=None,
        split=None,
        hover=None,
        basemap=None,
        cmap="viridis",
        **kwargs,
    ):
        """Use Cartopy to plot points as a scatter

        Parameters
        ----------
        color : str, optional
            A column name or a literal colour. A numeric column is mapped through ``cmap``.
            A non-numeric column splits the points into one labelled scatter per category.
        size : str or float, optional
            A column name (values are rescaled to marker areas) or a literal marker area.
        split : None, True or str
            Draw one labelled scatter per group.
        hover :
            Ignored, static maps have no hover labels.
        basemap : str, optional
            Draw this basemap first, see :func:`cartoplot.basemaps.available_basemaps`.
        """
        if hover is not None:
            logger.debug("Hover labels are not available with CartopyPlotEngine.")
        if basemap is not None:
            self.add_basemap(ax_or_fig, basemap, extent=lonlat_extent(gdf))

        if is_column(gdf, color) and not is_numeric_column(gdf, color):
            if split is not None and split != color:
                logger.warning(
                    f"The categorical colour column {color!r} overrides split={split!r}."
                )
            split, color = color, None

        projected = _reproject(ax_or_fig, gdf)
        if is_column(projected, size):
            # marker area in points^2
            projected = projected.assign(_marker_area=scale_sizes(projected[size]) ** 2)
        elif size is not None:
            kwargs["s"] = size

        groups = self.split_groups(projected, split)
        palette = discrete_colors([name for name, _ in groups]) if split is not None else {}

        for name, group in groups:
            x, y, rows = point_coordinates(group)
            group_kwargs = dict(kwargs)
            if "_marker_area" in group.columns:
                group_kwargs["s"] = group["_marker_area"].to_numpy()[rows]
            if is_column(group, color):
                group_kwargs["c"] = group[color].to_numpy()[rows]
                group_kwargs["cmap"] = cmap
            elif color is not None:
                group_kwargs["color"] = color
            elif split is not None:
                group_kwargs["color"] = palette.get(name, "black")
            if name is not None:
                group_kwargs["label"] = str(name)
            ax_or_fig.scatter(x, y, **group_kwargs)
        return ax_or_fig

    def plot_choropleth(
        self, ax_or_fig, gdf: GeoDataFrame, color, cmap="viridis", legend=True, **kwargs
    ):
        """Use Cartopy and GeoPandas to fill regions according to the ``color`` column

        Categorical columns (e.g. binned values) get a categorical legend.
        """
        if color not in gdf.columns:
            raise MissingColumn(color, gdf.columns)
        gdf = _reproject(ax_or_fig, gdf)
        kwargs.setdefault("edgecolor", "white")
        kwargs.setdefault("linewidth", 0.5)
        return gdf.plot(
            ax=ax_or_fig, column=color, cmap=cmap, legend=legend, **kwargs
        )

    def add_basemap(self, ax_or_fig, style=DEFAULT_MAP_STYLE, zoom=None, extent=None):
        """Draw a tile basemap onto a Cartopy GeoAxes

        Parameters
        ----------
        style : str
            See :func:`cartoplot.basemaps.available_basemaps`.
        zoom : int, optional
            Tile zoom level. Estimated from the map extent if not given.
        extent : tuple, optional
            (min_lon, max_lon, min_lat, max_lat). If given, the map is zoomed to it.
        """
        if not hasattr(ax_or_fig, "projection"):
            raise TypeError(
                "Basemaps need a Cartopy GeoAxes, such as ax = plt.subplot(111, projection=cartopy.crs.PlateCarree())"
            )
        tiles = get_tile_source(style)
        if extent is not None:
            ax_or_fig.set_extent(extent, crs=DEFAULT_CARTOPY_PROJECTION)

        if normalise_style(style) == "stock":
            ax_or_fig.stock_img()
            return ax_or_fig
        if tiles is None:
            ax_or_fig.set_facecolor("white")
            return ax_or_fig

        if zoom is None:
            try:
                zoom = zoom_for_extent(ax_or_fig.get_extent(DEFAULT_CARTOPY_PROJECTION))
            except ValueError:
                zoom = DEFAULT_ZOOM
        logger.debug(f"Add {style} tiles at zoom level {zoom}.")
        ax_or_fig.add_image(tiles, zoom)
        return ax_or_fig

