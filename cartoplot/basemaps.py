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

"""Background map layers (street maps, satellite imagery, etc.) for both plot engines."""

import logging
import math

import cartopy.io.img_tiles as cimgt

from .exceptions import UnknownBasemap

logger = logging.getLogger("cartoplot")

DEFAULT_MAP_STYLE = "open-street-map"
DEFAULT_ZOOM = 3
MAX_ZOOM = 18


class CartoTiles(cimgt.GoogleWTS):
    """CARTO basemap tiles. ``flavour`` is "light_all" or "dark_all"."""

    def __init__(self, flavour="light_all", cache=False):
        self.flavour = flavour
        super().__init__(cache=cache)

    def _image_url(self, tile):
        x, y, z = tile
        return f"https://basemaps.cartocdn.com/{self.flavour}/{z}/{x}/{y}.png"


_TILE_SOURCES = {
    "open-street-map": lambda: cimgt.OSM(),
    "satellite": lambda: cimgt.GoogleTiles(style="satellite"),
    "terrain": lambda: cimgt.GoogleTiles(style="terrain"),
    "carto-positron": lambda: CartoTiles("light_all"),
    "carto-darkmatter": lambda: CartoTiles("dark_all"),
    "white-bg": lambda: None,
    "stock": lambda: None,
}

_PLOTLY_STYLES = {
    "open-street-map": "open-street-map",
    "satellite": "satellite",
    "terrain": "outdoors",
    "carto-positron": "carto-positron",
    "carto-darkmatter": "carto-darkmatter",
    "white-bg": "white-bg",
    "stock": "open-street-map",
}


def available_basemaps():
    """Return a sorted list of the basemap style names."""
    return sorted(_TILE_SOURCES.keys())


def normalise_style(style):
    key = str(style).lower().replace("_", "-")
    if key not in _TILE_SOURCES:
        raise UnknownBasemap(style, available_basemaps())
    return key


def get_tile_source(style=DEFAULT_MAP_STYLE):
    """Return a `cartopy.io.img_tiles` tile source for the style.

    "white-bg" and "stock" return ``None``: the former draws no tiles and the latter
    is drawn with ``GeoAxes.stock_img()``.
    """
    return _TILE_SOURCES[normalise_style(style)]()


def to_plotly_style(style=DEFAULT_MAP_STYLE):
    """Return the plotly ``layout.map.style`` for the style."""
    key = normalise_style(style)
    if key == "stock":
        logger.debug("plotly has no stock image basemap. Use open-street-map instead.")
    return _PLOTLY_STYLES[key]


def zoom_for_extent(extent):
    """Estimate a slippy-map zoom level for an extent.

    Parameters
    ----------
    extent : tuple
        (min_lon, max_lon, min_lat, max_lat)

    Returns
    -------
    int
        zoom level between 0 and 18
    """
    min_lon, max_lon, min_lat, max_lat = extent
    lon_span = abs(max_lon - min_lon)
    lat_span = abs(max_lat - min_lat)
    spans = []
    if lon_span > 0:
        spans.append(math.log2(360.0 / lon_span))
    if lat_span > 0:
        spans.append(math.log2(180.0 / lat_span))
    if not spans:
        return MAX_ZOOM
    return int(min(MAX_ZOOM, max(0, math.floor(min(spans)))))
