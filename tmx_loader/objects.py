"""
Object groups and the objects they contain.

Objects are free-form shapes placed on the map: collision boxes, spawn
points, trigger areas, paths...

=============================================================================
OBJECT SHAPES
=============================================================================

    rectangle   <object id="1" x="0" y="0" width="32" height="16"/>
    ellipse     <object ...><ellipse/></object>
    point       <object ...><point/></object>
    polygon     <object ...><polygon points="0,0 32,0 32,32"/></object>
    polyline    <object ...><polyline points="0,0 10,5 20,0"/></object>
    tile        <object gid="42" .../>  (rectangle with a tile graphic)

Polygon and polyline points are relative to the object's (x, y).
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .attributes import bool_attr, color_attr, float_attr, uint_attr
from .color import Color
from .errors import SchemaError, UnknownElement
from .properties import PropertyMap, find_properties

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

# "x,y" pairs separated by whitespace; compiled once, shared read-only
_NUMBER = r'[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?'
_POINTS = re.compile(rf'({_NUMBER}),({_NUMBER})')


class ObjectShape(Enum):
    RECTANGLE = 'rectangle'
    ELLIPSE = 'ellipse'
    POINT = 'point'
    POLYGON = 'polygon'
    POLYLINE = 'polyline'


def parse_points(text: str) -> Tuple[Point, ...]:
    """
    Extract the point list of a polygon/polyline.

    >>> parse_points("0,0 32,0 32,-16.5")
    ((0.0, 0.0), (32.0, 0.0), (32.0, -16.5))
    """
    points = tuple((float(x), float(y)) for x, y in _POINTS.findall(text))
    if not points:
        raise SchemaError(f"'{text}' contains no points")
    return points


@dataclass(frozen=True, eq=False)
class MapObject:
    id: int                                          # Unique object ID
    name: str = ""                                   # Object name
    type: str = ""                                   # Object type/class
    x: float = 0                                     # X position
    y: float = 0                                     # Y position
    width: float = 0                                 # Width (0 for points)
    height: float = 0                                # Height (0 for points)
    rotation: float = 0                              # Degrees, clockwise
    gid: Optional[int] = None                        # Tile GID (tile objects)
    visible: bool = True
    shape: ObjectShape = ObjectShape.RECTANGLE
    points: Tuple[Point, ...] = ()                   # Polygon/polyline only
    properties: Optional[PropertyMap] = None

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'MapObject':
        """Parse object from XML element."""
        shape = ObjectShape.RECTANGLE
        points = ()
        for child in elem:
            if child.tag in ('ellipse', 'point'):
                shape = ObjectShape(child.tag)
            elif child.tag in ('polygon', 'polyline'):
                shape = ObjectShape(child.tag)
                points = parse_points(child.get('points', ''))
            elif child.tag == 'text':
                logger.debug("object %s: text objects are read as rectangles",
                             elem.get('id'))
            elif child.tag != 'properties':
                raise UnknownElement(child.tag, elem.tag)

        return cls(
            id=uint_attr(elem, 'id'),
            name=elem.get('name', ''),
            type=elem.get('type', elem.get('class', '')),
            x=float_attr(elem, 'x', 0.0),
            y=float_attr(elem, 'y', 0.0),
            width=float_attr(elem, 'width', 0.0),
            height=float_attr(elem, 'height', 0.0),
            rotation=float_attr(elem, 'rotation', 0.0),
            gid=uint_attr(elem, 'gid', None),
            visible=bool_attr(elem, 'visible'),
            shape=shape,
            points=points,
            properties=find_properties(elem),
        )


@dataclass(frozen=True, eq=False)
class ObjectGroup:
    """
    Object layer - contains vector objects.

    Objects keep document order. draworder="index" asks the renderer to
    draw them in that order, "topdown" (the default) sorts them by y.
    """
    name: str                                        # Layer name
    id: int = 0                                      # Unique layer ID
    draworder: str = "topdown"
    color: Optional[Color] = None                    # Editor display color
    visible: bool = True
    opacity: float = 1.0
    offsetx: float = 0
    offsety: float = 0
    tintcolor: Optional[Color] = None
    objects: Tuple[MapObject, ...] = ()
    properties: Optional[PropertyMap] = None

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'ObjectGroup':
        """Parse object group from XML element."""
        objects = []
        for child in elem:
            if child.tag == 'object':
                objects.append(MapObject.from_xml(child))
            elif child.tag != 'properties':
                raise UnknownElement(child.tag, elem.tag)

        return cls(
            name=elem.get('name', ''),
            id=uint_attr(elem, 'id', 0),
            draworder=elem.get('draworder', 'topdown'),
            color=color_attr(elem, 'color'),
            visible=bool_attr(elem, 'visible'),
            opacity=float_attr(elem, 'opacity', 1.0),
            offsetx=float_attr(elem, 'offsetx', 0.0),
            offsety=float_attr(elem, 'offsety', 0.0),
            tintcolor=color_attr(elem, 'tintcolor'),
            objects=tuple(objects),
            properties=find_properties(elem),
        )

    def get_object_by_name(self, name: str) -> Optional[MapObject]:
        for obj in self.objects:
            if obj.name == name:
                return obj
        return None
