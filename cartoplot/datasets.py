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
Functions for downloading example map data: the US states and world countries TopoJSON
atlases published on the jsDelivr CDN. Files are stored in the user's cache and are reused
after being downloaded once.

The cache directory is ``pooch.os_cache("cartoplot")`` unless the ``CARTOPLOT_DATA_DIR``
environment variable names another directory.
"""
import logging
import os as _os
import shutil as _shutil

import pooch as _pooch
from pooch import HTTPDownloader as _HTTPDownloader
from pooch import os_cache as _os_cache
from pooch import retrieve as _retrieve

from .topojson import read_topojson

logger = logging.getLogger("cartoplot")

DATA_DIR_ENV = "CARTOPLOT_DATA_DIR"

# name: (url, TopoJSON object)
_datasets = {
    "us-states": (
        "https://cdn.jsdelivr.net/npm/us-atlas@3/states-10m.json",
        "states",
    ),
    "us-counties": (
        "https://cdn.jsdelivr.net/npm/us-atlas@3/counties-10m.json",
        "counties",
    ),
    "world-countries": (
        "https://cdn.jsdelivr.net/npm/world-atlas@2/countries-110m.json",
        "countries",
    ),
    "world-land": (
        "https://cdn.jsdelivr.net/npm/world-atlas@2/land-110m.json",
        "land",
    ),
}


def available_datasets():
    """Return the names of the registered datasets."""
    return list(_datasets.keys())


def path_to_cache():
    """Determine the absolute path to the cartoplot data cache."""
    env_path = _os.environ.get(DATA_DIR_ENV)
    if env_path:
        return _pooch.utils.cache_location(env_path, env=None, version=None)
    return _pooch.utils.cache_location(_os_cache("cartoplot"), env=None, version=None)


def clear_cache():
    """Delete every downloaded file in the cartoplot data cache.

    Caution - this action cannot be undone.
    """
    cache_path = path_to_cache()
    if _os.path.isdir(cache_path):
        _shutil.rmtree(str(cache_path))
    _pooch.utils.make_local_storage(str(cache_path))


def fetch(name, verbose=False):
    """Download the dataset ``name`` (once) and return the path of the local copy.

    Parameters
    ----------
    name : str
        One of :func:`available_datasets`.
    verbose : bool, default=False
        Show a download progress bar.

    Raises
    ------
    KeyError
        If ``name`` is not a registered dataset.
    """
    if name not in _datasets:
        raise KeyError(
            f"Unknown dataset {name!r}. Available datasets are: {', '.join(available_datasets())}."
        )
    url, _ = _datasets[name]
    logger.debug(f"Fetch {name} from {url}.")
    return _retrieve(
        url=url,
        known_hash=None,
        fname=f"{name}.topojson",
        path=path_to_cache(),
        downloader=_HTTPDownloader(progressbar=verbose),
    )


def load(name, verbose=False):
    """Fetch the dataset ``name`` and read it into a GeoDataFrame with :func:`read_topojson`."""
    path = fetch(name, verbose=verbose)
    return read_topojson(path, object_name=_datasets[name][1])


def load_us_states(verbose=False):
    """Return the US states (with their FIPS code as ``id`` and a ``name`` column) as a GeoDataFrame."""
    return load("us-states", verbose=verbose)


def load_world_countries(verbose=False):
    """Return the world countries (with their ISO 3166 numeric code as ``id`` and a ``name`` column) as a GeoDataFrame."""
    return load("world-countries", verbose=verbose)
