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
from abc import ABC, abstractmethod

from geopandas.geodataframe import GeoDataFrame

from ..basemaps import DEFAULT_MAP_STYLE
from ..exceptions import MissingColumn


class PlotEngine(ABC):
    """Abstract base class for map plotting.
    Do not use this base class directly. Use subclasses instead, such as :class:`CartopyPlotEngine` or :class:`PlotlyPlotEngine`.
    """

    @abstractmethod
    def new_map(self, projection=None, **kwargs):
        """Create the object to draw on: a Cartopy GeoAxes or a plotly Figure (abstract method)"""
        pass  # This is an abstract method, no implementation here.

    @abstractmethod
    def plot_geo_data_frame(self, ax_or_fig, gdf: GeoDataFrame, split=None, **kwargs):
        """Plot GeoPandas GeoDataFrame object (abstract method)"""
        pass  # This is an abstract method, no implementation here.

    @abstractmethod
    def plot_points(
        self,
        ax_or_fig,
        gdf: GeoDataFrame,
        color=None,
        size=None,
        split=None,
        hover=None,
        basemap=None,
        **kwargs,
    ):
        """Plot point geometries as a scatter (abstract method)"""
        pass  # This is an abstract method, no implementation here.

    @abstractmethod
    def plot_choropleth(self, ax_or_fig, gdf: GeoDataFrame, color, cmap="viridis", **kwargs):
        """Plot regions filled according to a variable (abstract method)"""
        pass  # This is an abstract method, no implementation here.

    @abstractmethod
    def add_basemap(self, ax_or_fig, style=DEFAULT_MAP_STYLE, zoom=None, extent=None):
        """Draw a tile basemap behind the data (abstract method)"""
        pass  # This is an abstract method, no implementation here.

    @staticmethod
    def split_groups(gdf: GeoDataFrame, split=None):
        """Split a GeoDataFrame into (name, sub-frame) pairs, one per trace/artist.

        Parameters
        ----------
        split : None, True or str
            ``None`` gives a single group named ``None``. ``True`` gives one group per row,
            named by the row index. A column name gives one group per distinct value,
            in order of first appearance.
        """
        if split is None or split is False:
            return [(None, gdf)]
        if split is True:
            return [(str(idx), gdf.iloc[[i]]) for i, idx in enumerate(gdf.index)]
        if split not in gdf.columns:
            raise MissingColumn(split, gdf.columns)
        return [
            (name, group)
            for name, group in gdf.groupby(split, sort=False, dropna=False)
        ]
