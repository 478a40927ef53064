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

from ..topojson import read_topojson, topology_objects

logger = logging.getLogger("cartoplot")

help_str = "Convert a TopoJSON object into another vector format."

__description__ = f"""{help_str}

The output format follows the file extension (.gpkg, .geojson, .shp, etc.).

Example usage: 
    - cartoplot topojson states-10m.json states.gpkg --object states
    - cartoplot topojson states-10m.json --list
"""


def add_parser(subparser):
    """add 'topojson' command line argument parser"""
    topojson_cmd = subparser.add_parser(
        "topojson",
        help=help_str,
        add_help=True,
        description=__description__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # topojson command arguments
    topojson_cmd.set_defaults(func=run_topojson)
    topojson_cmd.add_argument(
        metavar="INPUT_FILE", help="input TopoJSON file", dest="input_file"
    )
    topojson_cmd.add_argument(
        metavar="OUTPUT_FILE",
        nargs="?",
        default=None,
        help="output vector file",
        dest="output_file",
    )
    topojson_cmd.add_argument(
        "-o",
        "--object",
        type=str,
        default=None,
        help="the object to convert; may be omitted if the topology holds a single object",
        dest="object_name",
    )
    topojson_cmd.add_argument(
        "-l",
        "--list",
        action="store_true",
        help="list the objects in the topology and exit",
        dest="list_objects",
    )


def run_topojson(args):
    if args.list_objects:
        print()
        print("Objects:")
        for name in topology_objects(args.input_file):
            print(f"    {name}")
        print()
        return
    if args.output_file is None:
        raise ValueError("OUTPUT_FILE is required unless --list is given.")

    gdf = read_topojson(args.input_file, object_name=args.object_name)
    gdf.to_file(args.output_file)
    print(
        f"Done! {len(gdf)} features have been converted and saved to {args.output_file}."
    )
