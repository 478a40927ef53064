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

"""Color encodings shared by the Cartopy and plotly plot engines."""

import logging

import mapclassify
import matplotlib
import numpy as np
import pandas as pd
from matplotlib.colors import Colormap, to_hex
from plotly.colors import named_colorscales

logger = logging.getLogger("cartoplot")

CLASSIFICATION_SCHEMES = ("quantiles", "equal_interval", "jenks")


def _get_cmap(cmap):
    if isinstance(cmap, Colormap):
        return cmap
    return matplotlib.colormaps[cmap]


def to_plotly_colorscale(cmap="viridis", n=11):
    """Convert a matplotlib colormap into a plotly colorscale.

    Parameters
    ----------
    cmap : str, matplotlib.colors.Colormap or list
        A matplotlib colormap (name or object). Plotly named colorscales (e.g. "Viridis",
        "ylorrd") are returned as they are. A list is checked to be a valid plotly
        colorscale and returned.
    n : int, default=11
        Number of samples taken from the matplotlib colormap.

    Returns
    -------
    list or str
        ``[[0.0, "rgb(r,g,b)"], ..., [1.0, "rgb(r,g,b)"]]`` or a plotly colorscale name.
    """
    if isinstance(cmap, (list, tuple)):
        return _validate_colorscale(cmap)
    if n < 2:
        raise ValueError(f"At least 2 samples are needed for a colorscale, got {n}.")

    if isinstance(cmap, str):
        try:
            colormap = _get_cmap(cmap)
        except KeyError:
            name = cmap.lower()
            if name.endswith("_r"):
                name = name[:-2]
            if name in named_colorscales():
                return cmap
            raise ValueError(
                f"{cmap!r} is neither a matplotlib colormap nor a plotly colorscale."
            )
    else:
        colormap = _get_cmap(cmap)

    scale = []
    for x in np.linspace(0.0, 1.0, n):
        r, g, b, _ = colormap(x)
        scale.append(
            [float(x), f"rgb({int(round(r * 255))},{int(round(g * 255))},{int(round(b * 255))})"]
        )
    return scale


def _validate_colorscale(scale):
    if len(scale) < 2:
        raise ValueError("A colorscale needs at least two entries.")
    positions = []
    for entry in scale:
        if len(entry) != 2 or not isinstance(entry[1], str):
            raise ValueError(
                f"Each colorscale entry must be [position, color], got {entry!r}."
            )
        positions.append(float(entry[0]))
    if positions[0] != 0.0 or positions[-1] != 1.0 or np.any(np.diff(positions) < 0):
        raise ValueError(
            "Colorscale positions must increase from 0 to 1 (inclusive)."
        )
    return [list(entry) for entry in scale]


def classify(values, k=5, scheme="quantiles"):
    """Return the bin edges of a classified (binned) choropleth.

    Parameters
    ----------
    values : array-like
        Numeric values. NaN values are ignored.
    k : int, default=5
        Number of classes.
    scheme : {"quantiles", "equal_interval", "jenks"}
        "jenks" uses the Fisher-Jenks natural breaks from mapclassify.

    Returns
    -------
    numpy.ndarray
        Strictly increasing edges. The first edge is the minimum and the last is the maximum.
        When all values are equal, the single class spans value-0.5 to value+0.5.
    """
    if scheme not in CLASSIFICATION_SCHEMES:
        raise ValueError(
            f"Unknown classification scheme {scheme!r}. Valid schemes are: {', '.join(CLASSIFICATION_SCHEMES)}."
        )
    if k < 1:
        raise ValueError(f"The number of classes must be at least 1, got {k}.")

    v = np.asarray(values, dtype=float)
    v = v[~np.isnan(v)]
    if v.size == 0:
        raise ValueError("Unable to classify values: all values are NaN.")

    vmin, vmax = v.min(), v.max()
    if vmin == vmax:
        return np.array([vmin - 0.5, vmax + 0.5])

    if scheme == "quantiles":
        edges = np.quantile(v, np.linspace(0.0, 1.0, k + 1))
    elif scheme == "equal_interval":
        edges = np.linspace(vmin, vmax, k + 1)
    else:
        k = min(k, np.unique(v).size)
        bins = mapclassify.FisherJenks(v, k=k).bins
        edges = np.concatenate([[vmin], bins])

    return np.unique(edges)


def bin_labels(edges, fmt="{:.4g}"):
    """Return labels such as "0 - 10" for consecutive pairs of bin edges."""
    return [
        f"{fmt.format(lo)} - {fmt.format(hi)}" for lo, hi in zip(edges[:-1], edges[1:])
    ]


def assign_bins(values, edges, fmt="{:.4g}"):
    """Assign every value to a bin and return an ordered `pandas.Categorical` of bin labels.

    The last bin is closed on both sides so that the maximum is included. NaN stays NaN.
    """
    labels = bin_labels(edges, fmt=fmt)
    binned = pd.cut(
        np.asarray(values, dtype=float),
        bins=np.asarray(edges, dtype=float),
        labels=labels,
        include_lowest=True,
    )
    return pd.Categorical(binned, categories=labels, ordered=True)


def discrete_colors(categories, palette="tab10"):
    """Map each distinct category (in order of first appearance) to a hex colour.

    Parameters
    ----------
    categories : array-like
    palette : str or list, default="tab10"
        A matplotlib colormap name, or a list of colours. Colours are reused cyclically.

    Returns
    -------
    dict
    """
    unique = list(pd.unique(pd.Series(list(categories)).dropna()))
    if isinstance(palette, (list, tuple)):
        colors = [to_hex(c) for c in palette]
    else:
        colormap = _get_cmap(palette)
        n = getattr(colormap, "N", 256)
        if hasattr(colormap, "colors") and n <= 20:
            colors = [to_hex(c) for c in colormap.colors]
        else:
            colors = [
                to_hex(colormap(x))
                for x in np.linspace(0.0, 1.0, max(len(unique), 1))
            ]
    if not colors:
        raise ValueError("The palette has no colours.")
    return {c: colors[i % len(colors)] for i, c in enumerate(unique)}
