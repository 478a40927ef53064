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
Read TopoJSON files into `geopandas.GeoDataFrame`_ objects.

TopoJSON stores the shared boundaries of neighbouring regions only once, as "arcs".
Geometries refer to arcs by index, and a negative index ``~i`` refers to arc ``i`` reversed.
A quantised topology has a ``transform`` (scale and translate). Its arc positions are
delta-encoded integers, while point positions are quantised but not delta-encoded.

See https://github.com/topojson/topojson-specification

.. _geopandas.GeoDataFrame: https://geopandas.org/en/stable/docs/reference/api/geopandas.GeoDataFrame.html
"""

import json
import logging
import os

import geopandas as gpd
from shapely.geometry import (
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)

from .exceptions import InvalidTopoJSON
from .geometry import DEFAULT_CRS

logger = logging.getLogger("cartoplot")


def load_topology(source):
    """Load a TopoJSON topology.

    Parameters
    ----------
    source : str, os.PathLike, bytes or dict
        A file path, a JSON string, JSON bytes or an already-parsed dict.

    Returns
    -------
    dict
    """
    if isinstance(source, dict):
        topology = source
    elif isinstance(source, (bytes, bytearray)):
        topology = _loads(source.decode("utf-8"))
    elif isinstance(source, str) and source.lstrip().startswith("{"):
        topology = _loads(source)
    elif isinstance(source, (str, os.PathLike)):
        with open(source, "rt", encoding="utf-8") as f:
            topology = _loads(f.read())
    else:
        raise TypeError(
            f"Expecting a path, JSON string, bytes or dict, but got {type(source)}."
        )

    if not isinstance(topology, dict) or topology.get("type") != "Topology":
        raise InvalidTopoJSON('the top-level "type" must be "Topology".')
    if not isinstance(topology.get("objects"), dict):
        raise InvalidTopoJSON('the topology has no "objects" mapping.')
    if not isinstance(topology.get("arcs", []), list):
        raise InvalidTopoJSON('the "arcs" member must be a list.')
    return topology


def _loads(text):
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidTopoJSON(f"unable to parse JSON ({e}).") from e


def is_topojson(path):
    """Return True if the file at ``path`` is a TopoJSON topology."""
    if str(path).lower().endswith(".topojson"):
        return True
    if not str(path).lower().endswith(".json"):
        return False
    try:
        load_topology(path)
    except (InvalidTopoJSON, OSError, UnicodeDecodeError):
        return False
    return True


def topology_objects(topology):
    """Return the names of the objects in the topology."""
    return list(load_topology(topology)["objects"].keys())


def _get_transform(topology):
    transform = topology.get("transform")
    if transform is None:
        return None
    try:
        sx, sy = transform["scale"]
        tx, ty = transform["translate"]
    except (KeyError, TypeError, ValueError):
        raise InvalidTopoJSON('"transform" must have "scale" and "translate" pairs.')
    return float(sx), float(sy), float(tx), float(ty)


def decode_arcs(topology):
    """Return the arcs of the topology as lists of absolute (x, y) tuples.

    Quantised arcs are delta-decoded and then scaled and translated.
    """
    topology = load_topology(topology)
    transform = _get_transform(topology)
    decoded = []
    for arc in topology.get("arcs", []):
        if transform is None:
            decoded.append([(float(p[0]), float(p[1])) for p in arc])
            continue
        sx, sy, tx, ty = transform
        x = y = 0
        points = []
        for p in arc:
            x += p[0]
            y += p[1]
            points.append((x * sx + tx, y * sy + ty))
        decoded.append(points)
    return decoded


class _GeometryDecoder(object):
    def __init__(self, topology):
        self.arcs = decode_arcs(topology)
        self.transform = _get_transform(topology)

    def position(self, p):
        if self.transform is None:
            return (float(p[0]), float(p[1]))
        sx, sy, tx, ty = self.transform
        return (p[0] * sx + tx, p[1] * sy + ty)

    def arc(self, index):
        try:
            if index < 0:
                return self.arcs[~index][::-1]
            return self.arcs[index]
        except IndexError:
            raise InvalidTopoJSON(f"arc index {index} is out of range.")

    def line(self, arc_indices):
        coords = []
        for i, index in enumerate(arc_indices):
            points = self.arc(index)
            # consecutive arcs share an end point
            coords.extend(points[1:] if i > 0 and coords else points)
        if len(coords) == 1:
            coords.append(coords[0])
        return coords

    def ring(self, arc_indices):
        coords = self.line(arc_indices)
        while 0 < len(coords) < 4:
            coords.append(coords[0])
        return coords

    def polygon(self, rings):
        if not rings:
            return Polygon()
        rings = [self.ring(r) for r in rings]
        return Polygon(rings[0], rings[1:])

    def geometry(self, obj):
        geom_type = obj.get("type")
        if geom_type is None:
            return None
        if geom_type == "Point":
            return Point(self.position(obj["coordinates"]))
        if geom_type == "MultiPoint":
            return MultiPoint([self.position(p) for p in obj.get("coordinates", [])])
        if geom_type == "LineString":
            return LineString(self.line(obj["arcs"]))
        if geom_type == "MultiLineString":
            return MultiLineString([self.line(a) for a in obj.get("arcs", [])])
        if geom_type == "Polygon":
            return self.polygon(obj.get("arcs", []))
        if geom_type == "MultiPolygon":
            return MultiPolygon([self.polygon(p) for p in obj.get("arcs", [])])
        raise InvalidTopoJSON(f"unsupported geometry type {geom_type!r}.")


def _iter_features(obj, properties=None, feature_id=None):
    """yield (id, properties, geometry object) for every non-collection geometry"""
    merged = dict(properties or {})
    merged.update(obj.get("properties") or {})
    obj_id = obj.get("id", feature_id)
    if obj.get("type") == "GeometryCollection":
        for member in obj.get("geometries", []):
            yield from _iter_features(member, merged, obj_id)
    else:
        yield obj_id, merged, obj


def read_topojson(source, object_name=None, crs=DEFAULT_CRS):
    """Read one object of a TopoJSON topology into a `geopandas.GeoDataFrame`_.

    Parameters
    ----------
    source : str, os.PathLike, bytes or dict
        See :func:`load_topology`.
    object_name : str, optional
        The object to read. May be omitted when the topology holds a single object.
    crs : str, default="EPSG:4326"
        The CRS of the decoded coordinates.

    Returns
    -------
    geopandas.GeoDataFrame
        Columns: "id" (when any geometry has an id), one column per property and "geometry".
    """
    topology = load_topology(source)
    objects = topology["objects"]
    if object_name is None:
        if len(objects) != 1:
            raise InvalidTopoJSON(
                f"the topology holds {len(objects)} objects; choose one of {list(objects.keys())}."
            )
        object_name = next(iter(objects))
    elif object_name not in objects:
        raise InvalidTopoJSON(
            f"object {object_name!r} not found; choose one of {list(objects.keys())}."
        )

    decoder = _GeometryDecoder(topology)
    ids, records, geometries = [], [], []
    for feature_id, properties, geometry in _iter_features(objects[object_name]):
        ids.append(feature_id)
        records.append(properties)
        geometries.append(decoder.geometry(geometry))

    columns = []
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)
    data = {}
    if any(i is not None for i in ids):
        data["id"] = ids
    for key in columns:
        if key == "id" and "id" in data:
            logger.warning(
                'The property "id" clashes with the TopoJSON geometry id and is ignored.'
            )
            continue
        data[key] = [record.get(key) for record in records]

    logger.debug(f"Read {len(geometries)} geometries from TopoJSON object {object_name!r}.")
    return gpd.GeoDataFrame(data, geometry=gpd.GeoSeries(geometries, crs=crs), crs=crs)
