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
Map projections by name.

A projection can be given as a name ("robinson", "Natural Earth", "albers-usa"), as a
:class:`ProjectionSpec` carrying the projection parameters, or as a Cartopy CRS. The same
name means the same projection in both plot engines: :func:`to_cartopy` returns a
`cartopy.crs.Projection`_ and :func:`to_plotly` returns the dict for plotly's
``layout.geo.projection``.

.. _cartopy.crs.Projection: https://scitools.org.uk/cartopy/docs/latest/reference/projections.html
"""

import logging
from typing import Union

import cartopy.crs as ccrs

from .exceptions import UnknownProjection

logger = logging.getLogger("cartoplot")

DEFAULT_PROJECTION_NAME = "equirectangular"

_ALIASES = {
    "platecarree": "equirectangular",
    "plate carree": "equirectangular",
    "latlon": "equirectangular",
    "albers": "conic equal area",
    "albers equal area": "conic equal area",
    "lambert conformal": "conic conformal",
    "lambert azimuthal equal area": "azimuthal equal area",
    "eckert iv": "eckert4",
    "utm": "transverse mercator",
}


class ProjectionSpec(object):
    """A map projection given by name and parameters.

    Parameters
    ----------
    name : str
        Projection name, see :func:`available_projections`. Case, spaces, dashes and
        underscores are ignored when matching.
    central_longitude, central_latitude : float, default=0.0
        The projection centre (the rotation in plotly's terms).
    parallels : tuple of two floats, optional
        Standard parallels for the conic projections.
    scale : float, optional
        Plotly zoom factor. Ignored by Cartopy.
    rotation_roll : float, default=0.0
        Plotly roll angle. Ignored by Cartopy.
    """

    def __init__(
        self,
        name: str = DEFAULT_PROJECTION_NAME,
        central_longitude: float = 0.0,
        central_latitude: float = 0.0,
        parallels=None,
        scale=None,
        rotation_roll: float = 0.0,
    ):
        self.name = normalise_name(name)
        self.central_longitude = float(central_longitude)
        self.central_latitude = float(central_latitude)
        if parallels is not None:
            parallels = tuple(float(p) for p in parallels)
            if len(parallels) != 2:
                raise ValueError(
                    f"Expecting two standard parallels, but got {len(parallels)}."
                )
        self.parallels = parallels
        self.scale = scale
        self.rotation_roll = float(rotation_roll)

    def __eq__(self, other):
        if not isinstance(other, ProjectionSpec):
            return NotImplemented
        return self.__dict__ == other.__dict__

    def __repr__(self):
        return (
            f"ProjectionSpec(name={self.name!r}, central_longitude={self.central_longitude}, "
            f"central_latitude={self.central_latitude}, parallels={self.parallels}, "
            f"scale={self.scale}, rotation_roll={self.rotation_roll})"
        )


def normalise_name(name: str) -> str:
    """lower case, and treat "-", "_" and repeated spaces as a single space"""
    key = " ".join(str(name).lower().replace("-", " ").replace("_", " ").split())
    key = _ALIASES.get(key, key)
    if key not in _CARTOPY_BUILDERS:
        raise UnknownProjection(name, available_projections())
    return key


def _conic(cls, default_parallels):
    def build(spec):
        return cls(
            central_longitude=spec.central_longitude,
            central_latitude=spec.central_latitude,
            standard_parallels=spec.parallels or default_parallels,
        )

    return build


def _albers_usa(spec):
    logger.debug(
        "Cartopy has no composite Albers USA projection. Use Albers equal area centred on the contiguous US."
    )
    return ccrs.AlbersEqualArea(
        central_longitude=-96.0,
        central_latitude=37.5,
        standard_parallels=(29.5, 45.5),
    )


def _natural_earth(spec):
    logger.debug("Cartopy has no Natural Earth projection. Use Robinson instead.")
    return ccrs.Robinson(central_longitude=spec.central_longitude)


_CARTOPY_BUILDERS = {
    "equirectangular": lambda s: ccrs.PlateCarree(central_longitude=s.central_longitude),
    "mercator": lambda s: ccrs.Mercator(central_longitude=s.central_longitude),
    "transverse mercator": lambda s: ccrs.TransverseMercator(
        central_longitude=s.central_longitude,
        central_latitude=s.central_latitude,
    ),
    "robinson": lambda s: ccrs.Robinson(central_longitude=s.central_longitude),
    "mollweide": lambda s: ccrs.Mollweide(central_longitude=s.central_longitude),
    "orthographic": lambda s: ccrs.Orthographic(
        central_longitude=s.central_longitude,
        central_latitude=s.central_latitude,
    ),
    "stereographic": lambda s: ccrs.Stereographic(
        central_latitude=s.central_latitude,
        central_longitude=s.central_longitude,
    ),
    "gnomonic": lambda s: ccrs.Gnomonic(
        central_latitude=s.central_latitude,
        central_longitude=s.central_longitude,
    ),
    "azimuthal equal area": lambda s: ccrs.LambertAzimuthalEqualArea(
        central_longitude=s.central_longitude,
        central_latitude=s.central_latitude,
    ),
    "azimuthal equidistant": lambda s: ccrs.AzimuthalEquidistant(
        central_longitude=s.central_longitude,
        central_latitude=s.central_latitude,
    ),
    "conic equal area": _conic(ccrs.AlbersEqualArea, (20.0, 50.0)),
    "conic conformal": _conic(ccrs.LambertConformal, (33.0, 45.0)),
    "conic equidistant": _conic(ccrs.EquidistantConic, (20.0, 50.0)),
    "miller": lambda s: ccrs.Miller(central_longitude=s.central_longitude),
    "sinusoidal": lambda s: ccrs.Sinusoidal(central_longitude=s.central_longitude),
    "equal earth": lambda s: ccrs.EqualEarth(central_longitude=s.central_longitude),
    "eckert4": lambda s: ccrs.EckertIV(central_longitude=s.central_longitude),
    "hammer": lambda s: ccrs.Hammer(central_longitude=s.central_longitude),
    "aitoff": lambda s: ccrs.Aitoff(central_longitude=s.central_longitude),
    "natural earth": _natural_earth,
    "albers usa": _albers_usa,
}

# plotly names its projection types the way d3-geo does; ours follow plotly's
_PLOTLY_TYPES = {name: name for name in _CARTOPY_BUILDERS}

_CONIC = ("conic equal area", "conic conformal", "conic equidistant")


def available_projections():
    """Return a sorted list of the known projection names."""
    return sorted(_CARTOPY_BUILDERS.keys())


def resolve_projection(projection=None) -> Union[ProjectionSpec, ccrs.CRS]:
    """Resolve a projection given by name, :class:`ProjectionSpec` or Cartopy CRS.

    Parameters
    ----------
    projection : None, str, ProjectionSpec or cartopy.crs.CRS
        ``None`` means the default equirectangular projection.

    Returns
    -------
    ProjectionSpec or cartopy.crs.CRS
        Cartopy CRS objects are returned unchanged.
    """
    if projection is None:
        return ProjectionSpec(DEFAULT_PROJECTION_NAME)
    if isinstance(projection, (ProjectionSpec, ccrs.CRS)):
        return projection
    if isinstance(projection, str):
        return ProjectionSpec(projection)
    raise TypeError(
        f"Expecting a projection name, ProjectionSpec or cartopy CRS, but got {type(projection)}."
    )


def to_cartopy(projection=None) -> ccrs.CRS:
    """Return the `cartopy.crs.Projection`_ for the given projection."""
    spec = resolve_projection(projection)
    if isinstance(spec, ccrs.CRS):
        return spec
    return _CARTOPY_BUILDERS[spec.name](spec)


def to_plotly(projection=None) -> dict:
    """Return the dict for plotly's ``layout.geo.projection``.

    A Cartopy CRS cannot be translated into a plotly projection and raises :class:`UnknownProjection`.
    """
    spec = resolve_projection(projection)
    if isinstance(spec, ccrs.CRS):
        raise UnknownProjection(type(spec).__name__, available_projections())

    result = {
        "type": _PLOTLY_TYPES[spec.name],
        "rotation": {
            "lon": spec.central_longitude,
            "lat": spec.central_latitude,
            "roll": spec.rotation_roll,
        },
    }
    if spec.name in _CONIC and spec.parallels is not None:
        result["parallels"] = list(spec.parallels)
    if spec.scale is not None:
        result["scale"] = spec.scale
    return result
