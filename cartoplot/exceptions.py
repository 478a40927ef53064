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


class UnknownProjection(Exception):
    """raise this exception when a map projection name cannot be resolved."""

    def __init__(self, name, known=()):
        msg = f"Unknown map projection: {name!r}."
        if known:
            msg += f" Valid names are: {', '.join(known)}."
        super().__init__(msg)
        self.name = name


class UnknownBasemap(Exception):
    """raise this exception when a basemap style name is not recognised."""

    def __init__(self, name, known=()):
        msg = f"Unknown basemap style: {name!r}."
        if known:
            msg += f" Valid styles are: {', '.join(known)}."
        super().__init__(msg)
        self.name = name


class MissingGeometryColumn(Exception):
    """raise this exception when the data has no geometry to plot."""

    def __init__(self, obj_type=None):
        super().__init__(
            f"Unable to find geometries in the given data ({obj_type}). Pass a GeoDataFrame, a GeoSeries, "
            "shapely geometries, or a DataFrame together with the longitude/latitude column names."
        )


class MissingColumn(Exception):
    """raise this exception when a required column is absent from a table."""

    def __init__(self, column, columns=()):
        super().__init__(
            f"The column {column!r} does not exist. Available columns: {list(columns)}."
        )
        self.column = column


class InvalidTopoJSON(Exception):
    """raise this exception when the input is not a valid TopoJSON topology."""

    def __init__(self, reason):
        super().__init__(f"Invalid TopoJSON: {reason}")


class CartogramError(Exception):
    """raise this exception when a cartogram cannot be computed for the given data."""

    def __init__(self, reason):
        super().__init__(f"Unable to compute cartogram: {reason}")
