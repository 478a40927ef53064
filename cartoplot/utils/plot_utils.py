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
import numpy as np
from pandas.api.types import is_bool_dtype, is_numeric_dtype


def is_column(gdf, value):
    """True if ``value`` names a column of ``gdf`` (as opposed to a literal colour or size)"""
    return isinstance(value, str) and value in gdf.columns


def is_numeric_column(gdf, column):
    return is_numeric_dtype(gdf[column]) and not is_bool_dtype(gdf[column])


def scale_sizes(values, min_size=4.0, max_size=30.0):
    """Linearly rescale values to marker sizes between ``min_size`` and ``max_size``. NaN becomes ``min_size``."""
    v = np.asarray(values, dtype=float)
    finite = v[~np.isnan(v)]
    if finite.size == 0:
        return np.full(v.shape, min_size)
    vmin, vmax = finite.min(), finite.max()
    if vmax == vmin:
        sizes = np.full(v.shape, (min_size + max_size) / 2.0)
    else:
        sizes = min_size + (max_size - min_size) * (v - vmin) / (vmax - vmin)
    return np.where(np.isnan(sizes), min_size, sizes)
