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

from ..plot import CARTOGRAM_METHODS, MapPlot

logger = logging.getLogger("cartoplot")

help_str = "Compute a cartogram and save it to a vector file."

__description__ = f"""{help_str}

The input polygons must be in a projected CRS, or be reprojected with --crs.
The output format follows the file extension (.gpkg, .geojson, .shp, etc.).

Example usage: 
    - cartoplot cartogram states.gpkg states_pop.gpkg --weight population
    - cartoplot cartogram states.topojson dorling.geojson --weight population --method dorling --crs EPSG:5070
"""


def add_parser(subparser):
    """add 'cartogram' command line argument parser"""
    cartogram_cmd = subparser.add_parser(
        "cartogram",
        help=help_str,
        add_help=True,
        description=__description__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # cartogram command arguments
    cartogram_cmd.set_defaults(func=run_cartogram)
    cartogram_cmd.add_argument(
        metavar="INPUT_FILE", help="input polygons file", dest="input_file"
    )
    cartogram_cmd.add_argument(
        metavar="OUTPUT_FILE", help="output vector file", dest="output_file"
    )
    cartogram_cmd.add_argument(
        "-w",
        "--weight",
        type=str,
        required=True,
        help="the column encoded by area",
        dest="weight",
    )
    cartogram_cmd.add_argument(
        "-m",
        "--method",
        choices=tuple(CARTOGRAM_METHODS.keys()),
        default="cont",
        help="contiguous, non-contiguous or Dorling cartogram; default: cont",
        dest="method",
    )
    cartogram_cmd.add_argument(
        "--crs",
        type=str,
        default=None,
        help="projected CRS to reproject the input to, e.g. EPSG:3857",
        dest="crs",
    )
    cartogram_cmd.add_argument(
        "-i",
        "--itermax",
        type=int,
        default=None,
        help="maximum number of iterations (cont and dorling)",
        dest="itermax",
    )
    cartogram_cmd.add_argument(
        "-k",
        type=float,
        default=None,
        help="size factor (ncont and dorling)",
        dest="k",
    )
    cartogram_cmd.add_argument(
        "--object", type=str, default=None, help="TopoJSON object name", dest="object_name"
    )


def run_cartogram(args):
    kwargs = {}
    if args.itermax is not None:
        if args.method == "ncont":
            logger.warning("--itermax is not used by the non-contiguous cartogram.")
        else:
            kwargs["itermax"] = args.itermax
    if args.k is not None:
        if args.method == "cont":
            logger.warning("-k is not used by the contiguous cartogram.")
        else:
            kwargs["k"] = args.k

    map_plot = MapPlot()
    gdf = map_plot.get_features(args.input_file, object_name=args.object_name)
    result = map_plot.get_cartogram(
        gdf, args.weight, method=args.method, crs=args.crs, **kwargs
    )
    result.to_file(args.output_file)
    print(f"Done! The cartogram has been saved to {args.output_file}.")
