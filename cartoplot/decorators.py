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
import warnings
from functools import wraps

from .geometry import ensure_geo_data_frame

logger = logging.getLogger("cartoplot")


def append_docstring(docstring_to_add):
    """append text to the end of the function's __doc__

    Parameters
    ----------
    docstring_to_add : str
        the text to append to the function's __doc__
    """

    def inner(func_pointer):
        if func_pointer.__doc__:
            func_pointer.__doc__ += docstring_to_add
        else:
            func_pointer.__doc__ = docstring_to_add

        @wraps(func_pointer)
        def wrapper(*args, **kwargs):
            return func_pointer(*args, **kwargs)

        return wrapper

    return inner


def validate_geo_data_frame(func_pointer):
    """convert the data argument (the one after ``ax_or_fig``) into a GeoDataFrame with a CRS.
    Raise MissingGeometryColumn if the data has no geometry."""

    @wraps(func_pointer)
    def wrapper(self, ax_or_fig, data, *args, **kwargs):
        return func_pointer(self, ax_or_fig, ensure_geo_data_frame(data), *args, **kwargs)

    return wrapper


def skip_empty(feature_name):
    """if the data argument is empty, do nothing and return the axes/figure

    Parameters
    ----------
    feature_name : str
        this parameter is used in the debug message, indicating in which function the data was empty.

    """

    def inner(func_pointer):
        @wraps(func_pointer)
        def wrapper(self, ax_or_fig, data, *args, **kwargs):
            if data is None or len(data) == 0:
                logger.debug(
                    f"No {feature_name} found for plotting. Do nothing and return."
                )
                return ax_or_fig
            return func_pointer(self, ax_or_fig, data, *args, **kwargs)

        return wrapper

    return inner


def ignore_transform(func_pointer):
    """drop the ``transform`` keyword argument with a warning. The plot engines own the coordinate transform."""

    @wraps(func_pointer)
    def wrapper(*args, **kwargs):
        if "transform" in kwargs.keys():
            warnings.warn(
                "'transform' keyword argument is ignored by cartoplot",
                UserWarning,
            )
            kwargs.pop("transform")
        return func_pointer(*args, **kwargs)

    return wrapper
