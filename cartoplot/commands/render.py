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

import argparse
import logging
import os

import pandas as pd

from ..geometry import geometry_kind, lonlat_extent, points_frame
from ..mapping.cartopy_plot import CartopyPlotEngine
from ..mapping.plotly_plot import PlotlyPlotEngine
from ..plot import MapPlot

logger = logging.getLogger("cartoplot")

help_str = "Render a map from a vector file, a TopoJSON file or a CSV table of points."

__description__ = f"""{help_str}

Points are drawn as a scatter, polygons as a choropleth when --color is given, and other
features as outlines. The output format follows the file extension: .png, .pdf or .svg with
the cartopy engine, .html with the plotly engine.

Example usage: 
    - cartoplot render states.topojson states.png --projection "albers usa"
    - cartoplot render states.topojson states.html --engine plotly --split name
    - cartoplot render quakes.csv quakes.html --engine plotly --lon longitude --lat latitude --color mag --basemap carto-positron
    - cartoplot render counties.geojson unemployment.png --color rate --scheme quantiles --cmap Blues
"""

STATIC_FORMATS = (".png", ".pdf", ".svg")
INTERACTIVE_FORMATS = (".html",)


def add_parser(subparser):
    """add 'render' command line argument parser"""
    render_cmd = subparser.add_parser(
        "render",
        help=help_str,
        add_help=True,
        description=__description__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # render command arguments
    render_cmd.set_defaults(func=run_render)
    render_cmd.add_argument(metavar="INPUT_FILE", help="input data file", dest="input_file")
    render_cmd.add_argument(metavar="OUTPUT_FILE", help="output map file", dest="output_file")
    render_cmd.add_argument(
        "-e",
        "--engine",
        choices=("cartopy", "plotly"),
        default="cartopy",
        help="plot engine; default: cartopy",
        dest="engine",
    )
    render_cmd.add_argument(
        "-p",
        "--projection",
        type=str,
        default=None,
        help="map projection name (see 'cartoplot projections'); default: equirectangular",
        dest="projection",
    )
    render_cmd.add_argument(
        "-c", "--color", type=str, default=None, help="column to colour by", dest="color"
    )
    render_cmd.add_argument(
        "--cmap", type=str, default="viridis", help="colormap; default: viridis", dest="cmap"
    )
    render_cmd.add_argument(
        "--scheme",
        choices=("quantiles", "equal_interval", "jenks"),
        default=None,
        help="classification scheme for choropleths",
        dest="scheme",
    )
    render_cmd.add_argument(
        "-k", type=int, default=5, help="number of classes; default: 5", dest="k"
    )
    render_cmd.add_argument(
        "-b",
        "--basemap",
        type=str,
        default=None,
        help="tile basemap style (see 'cartoplot basemaps')",
        dest="basemap",
    )
    render_cmd.add_argument(
        "-s",
        "--split",
        type=str,
        default=None,
        help="column to split the data into separate traces",
        dest="split",
    )
    render_cmd.add_argument(
        "--object", type=str, default=None, help="TopoJSON object name", dest="object_name"
    )
    render_cmd.add_argument(
        "--lon", type=str, default="lon", help="longitude column of CSV input", dest="lon"
    )
    render_cmd.add_argument(
        "--lat", type=str, default="lat", help="latitude column of CSV input", dest="lat"
    )


def run_render(args):
    ext = os.path.splitext(args.output_file)[1].lower()
    if args.engine == "plotly":
        if ext not in INTERACTIVE_FORMATS:
            raise ValueError(
                f"The plotly engine writes {INTERACTIVE_FORMATS}, but the output file is {args.output_file}."
            )
        engine = PlotlyPlotEngine()
    else:
        if ext not in STATIC_FORMATS:
            raise ValueError(
                f"The cartopy engine writes {STATIC_FORMATS}, but the output file is {args.output_file}."
            )
        engine = CartopyPlotEngine()

    map_plot = MapPlot(projection=args.projection, plot_engine=engine)
    if args.input_file.lower().endswith(".csv"):
        gdf = points_frame(pd.read_csv(args.input_file), lon=args.lon, lat=args.lat)
    else:
        gdf = map_plot.get_features(args.input_file, object_name=args.object_name)
    kind = geometry_kind(gdf)
    logger.info(f"Render {len(gdf)} {kind} features from {args.input_file}.")

    if args.engine == "plotly":
        ax_or_fig = map_plot.new_map(basemap=args.basemap)
    else:
        ax_or_fig = map_plot.new_map()
        if args.basemap is not None:
            map_plot.plot_basemap(ax_or_fig, args.basemap, extent=lonlat_extent(gdf))

    if kind == "point":
        map_plot.plot_points(
            ax_or_fig, gdf, color=args.color, split=args.split, cmap=args.cmap
        )
    elif kind == "polygon" and args.color is not None:
        map_plot.plot_choropleth(
            ax_or_fig, gdf, args.color, cmap=args.cmap, scheme=args.scheme, k=args.k
        )
    else:
        if args.color is not None:
            logger.warning(
                f"--color {args.color!r} is only used for points and polygons. Draw the outlines only."
            )
        map_plot.plot_features(ax_or_fig, gdf, split=args.split)

    if args.engine == "plotly":
        ax_or_fig.write_html(args.output_file)
    else:
        if args.split is not None and kind != "polygon":
            ax_or_fig.legend()
        ax_or_fig.figure.savefig(args.output_file, dpi=150, bbox_inches="tight")
    print(f"Done! The map has been saved to {args.output_file}.")
