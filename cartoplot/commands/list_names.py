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

from ..basemaps import available_basemaps
from ..projections import available_projections

help_str_projections = "Show a list of the known map projections."
help_str_basemaps = "Show a list of the known basemap styles."


def add_parser(subparser):
    """add 'projections' and 'basemaps' command line argument parsers"""
    projections_cmd = subparser.add_parser(
        "projections",
        help=help_str_projections,
        add_help=True,
    )
    projections_cmd.set_defaults(func=run_list_projections)

    basemaps_cmd = subparser.add_parser(
        "basemaps",
        help=help_str_basemaps,
        add_help=True,
    )
    basemaps_cmd.set_defaults(func=run_list_basemaps)


def _print_names(title, names):
    print()
    print(f"{title}:")
    for n in names:
        print(f"    {n}")
    print()


def run_list_projections(args):
    _print_names("Projections", available_projections())


def run_list_basemaps(args):
    _print_names("Basemaps", available_basemaps())
