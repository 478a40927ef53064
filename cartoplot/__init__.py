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
cartoplot draws maps from tabular and vector data: points on tile basemaps, simple features,
choropleths and cartograms, as static maps with Cartopy or interactive maps with plotly.

.. code-block:: python

    import cartoplot

    states = cartoplot.datasets.load_us_states()
    mp = cartoplot.MapPlot(projection="albers usa", plot_engine=cartoplot.PlotlyPlotEngine())
    fig = mp.new_map()
    mp.plot_features(fig, states, color="grey", split="name")
    fig.show()
"""

from .utils.log_utils import setup_logging
from .utils.version import get_distribution_version

__version__ = get_distribution_version()

setup_logging()
del setup_logging

from . import basemaps, cartogram, colors, datasets, projections
from .cartogram import cartogram_cont, cartogram_dorling, cartogram_ncont
from .exceptions import (
    CartogramError,
    InvalidTopoJSON,
    MissingColumn,
    MissingGeometryColumn,
    UnknownBasemap,
    UnknownProjection,
)
from .geometry import ensure_geo_data_frame, points_frame
from .mapping.cartopy_plot import CartopyPlotEngine
from .mapping.plot_engine import PlotEngine
from .mapping.plotly_plot import PlotlyPlotEngine
from .plot import MapPlot
from .projections import ProjectionSpec, available_projections, resolve_projection
from .topojson import load_topology, read_topojson

__all__ = [
    # modules
    "basemaps",
    "cartogram",
    "colors",
    "datasets",
    "projections",
    # main classes
    "MapPlot",
    "ProjectionSpec",
    # plot engines
    "PlotEngine",
    "CartopyPlotEngine",
    "PlotlyPlotEngine",
    # functions
    "available_projections",
    "cartogram_cont",
    "cartogram_dorling",
    "cartogram_ncont",
    "ensure_geo_data_frame",
    "load_topology",
    "points_frame",
    "read_topojson",
    "resolve_projection",
    # exceptions
    "CartogramError",
    "InvalidTopoJSON",
    "MissingColumn",
    "MissingGeometryColumn",
    "UnknownBasemap",
    "UnknownProjection",
]
