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
import json
import logging

import numpy as np
import pandas as pd
import plotly.graph_objects as go
from geopandas.geodataframe import GeoDataFrame

from ..basemaps import DEFAULT_MAP_STYLE, DEFAULT_ZOOM, to_plotly_style, zoom_for_extent
from ..colors import discrete_colors, to_plotly_colorscale
from ..exceptions import MissingColumn
from ..geometry import (
    DEFAULT_CRS,
    frame_to_lonlat,
    geometry_kind,
    lonlat_extent,
    point_coordinates,
)
from ..projections import resolve_projection, to_plotly
from ..utils.plot_utils import is_column, is_numeric_column, scale_sizes
from .plot_engine import PlotEngine

logger = logging.getLogger("cartoplot")


def _uses_tile_map(fig):
    """True once a basemap style has been set on the figure"""
    return fig.layout.map.style is not None


def _to_lonlat(gdf: GeoDataFrame):
    if gdf.crs is None:
        gdf = gdf.set_crs(DEFAULT_CRS)
    return gdf.to_crs(DEFAULT_CRS)


# outline map trace type: tile map trace type
_TILE_MAP_TRACES = {"scattergeo": "scattermap", "choropleth": "choroplethmap"}


def _move_traces_to_tile_map(fig):
    """Rebuild the traces already drawn on ``layout.geo`` as ``layout.map`` traces"""
    if not any(trace.type in _TILE_MAP_TRACES for trace in fig.data):
        return
    traces = []
    for trace in fig.data:
        props = trace.to_plotly_json()
        if trace.type in _TILE_MAP_TRACES:
            for key in ("geo", "locationmode", "uid"):
                props.pop(key, None)
            props["type"] = _TILE_MAP_TRACES[trace.type]
        traces.append(props)
    logger.debug(f"{len(traces)} trace(s) moved onto the tile map.")
    fig.data = []
    fig.add_traces(traces)
    fig.layout.geo = None


def _hover_text(gdf, hover, rows=None):
    if hover is None:
        return None
    columns = [hover] if isinstance(hover, str) else list(hover)
    for c in columns:
        if c not in gdf.columns:
            raise MissingColumn(c, gdf.columns)
    records = gdf[columns].astype(str).to_numpy()
    if rows is not None:
        records = records[rows]
    if len(columns) == 1:
        return list(records[:, 0])
    return [
        "<br>".join(f"{c}: {v}" for c, v in zip(columns, record)) for record in records
    ]


class PlotlyPlotEngine(PlotEngine):
    """Use plotly for interactive map plotting.

    Without a basemap, traces are drawn on ``layout.geo`` (outline maps with a map projection).
    Once a basemap is added, traces are drawn on ``layout.map`` (tile maps, always Web Mercator).
    """

    def __init__(self):
        pass

    def new_map(self, projection=None, basemap=None, **kwargs):
        """Create an empty plotly Figure

        Parameters
        ----------
        projection : str or ProjectionSpec
            Map projection of ``layout.geo``. Ignored when ``basemap`` is given.
        basemap : str, optional
            Draw a tile map (``layout.map``) with this style instead of an outline map.
        **kwargs :
            passed to ``fig.update_layout``

        Returns
        -------
        plotly.graph_objects.Figure
        """
        fig = go.Figure()
        if basemap is not None:
            if resolve_projection(projection) != resolve_projection(None):
                logger.warning(
                    "Tile maps are always drawn in Web Mercator. The projection is ignored."
                )
            self.add_basemap(fig, basemap)
        else:
            fig.update_layout(
                geo=dict(
                    projection=to_plotly(projection),
                    showland=True,
                    landcolor="rgb(243,243,243)",
                    showcountries=True,
                    countrycolor="rgb(204,204,204)",
                )
            )
        fig.update_layout(margin=dict(l=0, r=0, t=30, b=0), **kwargs)
        return fig

    def _scatter(self, fig, **trace_kwargs):
        if _uses_tile_map(fig):
            return go.Scattermap(**trace_kwargs)
        return go.Scattergeo(**trace_kwargs)

    def plot_geo_data_frame(self, ax_or_fig, gdf: GeoDataFrame, split=None, **kwargs):
        """Use plotly to plot geometries in a GeoDataFrame object onto a map

        Without ``split``, all geometries share one trace (coordinates separated by ``None``).
        With ``split``, one trace is added per group, so that every group gets its own legend
        entry, hover label and style.

        Parameters
        ----------
        ax_or_fig : plotly.graph_objects.Figure
        gdf : GeoDataFrame
        split : None, True or str
            see :meth:`PlotEngine.split_groups`
        color, edgecolor : str
            line colour
        facecolor : str
            fill colour of polygons. "none" (the default) draws outlines only.
        linewidth : float
        hover : str or list of str
            column(s) shown when hovering a group
        **kwargs :
            other plotly Scattergeo/Scattermap properties
        """
        gdf = _to_lonlat(gdf)
        hover = kwargs.pop("hover", None)
        line_color = kwargs.pop("edgecolor", kwargs.pop("color", None))
        facecolor = kwargs.pop("facecolor", "none")
        linewidth = kwargs.pop("linewidth", 1.0)
        name = kwargs.pop("label", None)
        opacity = kwargs.pop("alpha", None)

        groups = self.split_groups(gdf, split)
        palette = discrete_colors([n for n, _ in groups]) if split is not None else {}
        kind = geometry_kind(gdf)

        for group_name, group in groups:
            lons, lats = frame_to_lonlat(group)
            color = line_color or palette.get(group_name, "black")
            trace_kwargs = dict(
                lon=lons,
                lat=lats,
                name=str(group_name) if group_name is not None else name,
                showlegend=group_name is not None or name is not None,
            )
            if kind == "point":
                trace_kwargs["mode"] = "markers"
                trace_kwargs["marker"] = dict(color=color)
            else:
                trace_kwargs["mode"] = "lines"
                trace_kwargs["line"] = dict(color=color, width=linewidth)
                if kind == "polygon" and str(facecolor).lower() != "none":
                    trace_kwargs["fill"] = "toself"
                    trace_kwargs["fillcolor"] = facecolor
            if opacity is not None:
                trace_kwargs["opacity"] = opacity
            text = _hover_text(group, hover)
            if text:
                trace_kwargs["text"] = "<br>".join(dict.fromkeys(text))
                trace_kwargs["hoverinfo"] = "text"
            trace_kwargs.update(kwargs)
            ax_or_fig.add_trace(self._scatter(ax_or_fig, **trace_kwargs))
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
        """Use plotly to plot points as a scatter

        Parameters
        ----------
        color : str, optional
            A column name or a literal colour. A numeric column is mapped through ``cmap``
            with a colour bar. A non-numeric column splits the points into one trace per category.
        size : str or float, optional
            A column name (values are rescaled to marker diameters of 4-30 pixels) or a literal size.
        split : None, True or str
            One trace per group.
        hover : str or list of str
            Column(s) shown when hovering a point.
        basemap : str, optional
            Draw the points on a tile map with this style.
        **kwargs :
            other plotly Scattergeo/Scattermap properties
        """
        gdf = _to_lonlat(gdf)
        if basemap is not None:
            self.add_basemap(ax_or_fig, basemap, extent=lonlat_extent(gdf))

        if is_column(gdf, color) and not is_numeric_column(gdf, color):
            if split is not None and split != color:
                logger.warning(
                    f"The categorical colour column {color!r} overrides split={split!r}."
                )
            split, color = color, None

        marker_size = None
        if is_column(gdf, size):
            gdf = gdf.assign(_marker_size=scale_sizes(gdf[size]))
        elif size is not None:
            marker_size = size

        groups = self.split_groups(gdf, split)
        palette = discrete_colors([n for n, _ in groups]) if split is not None else {}
        colorscale = to_plotly_colorscale(cmap) if is_column(gdf, color) else None

        for i, (name, group) in enumerate(groups):
            x, y, rows = point_coordinates(group)
            marker = {}
            if "_marker_size" in group.columns:
                marker["size"] = group["_marker_size"].to_numpy()[rows]
            elif marker_size is not None:
                marker["size"] = marker_size
            if colorscale is not None:
                values = gdf[color].to_numpy(dtype=float)
                marker.update(
                    color=group[color].to_numpy()[rows],
                    colorscale=colorscale,
                    cmin=np.nanmin(values),
                    cmax=np.nanmax(values),
                    showscale=i == 0,
                    colorbar=dict(title=dict(text=color)),
                )
            elif color is not None:
                marker["color"] = color
            elif split is not None:
                marker["color"] = palette.get(name, "black")

            trace_kwargs = dict(
                lon=x,
                lat=y,
                mode="markers",
                marker=marker,
                name=str(name) if name is not None else None,
                showlegend=name is not None,
            )
            text = _hover_text(group, hover, rows)
            if text is not None:
                trace_kwargs["text"] = text
                trace_kwargs["hoverinfo"] = "text"
            trace_kwargs.update(kwargs)
            ax_or_fig.add_trace(self._scatter(ax_or_fig, **trace_kwargs))
        return ax_or_fig

    def plot_choropleth(
        self, ax_or_fig, gdf: GeoDataFrame, color, cmap="viridis", **kwargs
    ):
        """Use plotly to fill regions according to the ``color`` column

        The regions are passed to plotly as GeoJSON, keyed by the GeoDataFrame index.
        A categorical column (e.g. binned values) is drawn with a stepped colour scale and
        one colour bar tick per category.

        Parameters
        ----------
        hover : str or list of str
            column(s) shown when hovering a region
        edgecolor : str, default="white"
        linewidth : float, default=0.5
        **kwargs :
            other plotly Choropleth/Choroplethmap properties
        """
        if color not in gdf.columns:
            raise MissingColumn(color, gdf.columns)
        gdf = _to_lonlat(gdf)
        hover = kwargs.pop("hover", None)
        edgecolor = kwargs.pop("edgecolor", "white")
        linewidth = kwargs.pop("linewidth", 0.5)

        keys = [str(i) for i in gdf.index]
        regions = gdf[[gdf.geometry.name]].copy()
        regions.index = keys
        geojson = json.loads(regions.to_json())

        values = gdf[color]
        colorbar = dict(title=dict(text=color))
        if isinstance(values.dtype, pd.CategoricalDtype):
            categories = list(values.cat.categories)
            z = values.cat.codes.to_numpy().astype(float)
            z[z < 0] = np.nan
            colorscale = _stepped_colorscale(cmap, len(categories))
            colorbar.update(tickvals=list(range(len(categories))), ticktext=categories)
            zmin, zmax = -0.5, len(categories) - 0.5
        else:
            z = values.to_numpy(dtype=float)
            colorscale = to_plotly_colorscale(cmap)
            zmin, zmax = np.nanmin(z), np.nanmax(z)

        trace_kwargs = dict(
            geojson=geojson,
            locations=keys,
            z=z,
            zmin=zmin,
            zmax=zmax,
            colorscale=colorscale,
            colorbar=colorbar,
            marker=dict(line=dict(color=edgecolor, width=linewidth)),
            featureidkey="id",
        )
        text = _hover_text(gdf, hover)
        if text is not None:
            trace_kwargs["text"] = text
        trace_kwargs.update(kwargs)

        if _uses_tile_map(ax_or_fig):
            ax_or_fig.add_trace(go.Choroplethmap(**trace_kwargs))
        else:
            ax_or_fig.add_trace(go.Choropleth(**trace_kwargs))
            ax_or_fig.update_geos(fitbounds="locations")
        return ax_or_fig

    def add_basemap(self, ax_or_fig, style=DEFAULT_MAP_STYLE, zoom=None, extent=None):
        """Switch the figure to a tile map (``layout.map``) with the given style

        Traces already drawn on the outline map are moved onto the tile map.

        Parameters
        ----------
        style : str
            See :func:`cartoplot.basemaps.available_basemaps`.
        zoom : int, optional
            Estimated from ``extent`` if not given, otherwise DEFAULT_ZOOM.
        extent : tuple, optional
            (min_lon, max_lon, min_lat, max_lat). The map is centred on it.
        """
        map_layout = dict(style=to_plotly_style(style))
        if extent is not None:
            min_lon, max_lon, min_lat, max_lat = extent
            map_layout["center"] = dict(
                lon=(min_lon + max_lon) / 2.0, lat=(min_lat + max_lat) / 2.0
            )
            if zoom is None:
                zoom = zoom_for_extent(extent)
        map_layout["zoom"] = DEFAULT_ZOOM if zoom is None else zoom
        ax_or_fig.update_layout(map=map_layout)
        _move_traces_to_tile_map(ax_or_fig)
        return ax_or_fig


def _stepped_colorscale(cmap, n):
    """a plotly colorscale with ``n`` flat steps, one per category"""
    colors = list(discrete_colors(range(n), palette=cmap).values()) if n else []
    if n == 1:
        return [[0.0, colors[0]], [1.0, colors[0]]]
    scale = []
    for i, c in enumerate(colors):
        scale.append([i / n, c])
        scale.append([(i + 1) / n, c])
    return scale
