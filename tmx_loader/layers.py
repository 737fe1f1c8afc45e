"""
Tile layers and image layers.

Together with ObjectGroup (objects.py) these are the layer kinds a map can
contain. Map.layers keeps them in document order, which is the paint order:
the first layer is drawn at the bottom.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .attributes import bool_attr, color_attr, float_attr, uint_attr
from .color import Color
from .data import TileLayerData
from .errors import SchemaError, TileCountMismatch, UnknownElement
from .objects import ObjectGroup
from .properties import PropertyMap, find_properties
from .tileset import Image


@dataclass(frozen=True, eq=False)
class TileLayer:
    """
    Tile layer - a grid of tile references.

    ==========================================================================
    TILE ACCESS
    ==========================================================================

        gid = layer.get_tile_gid(5, 10)  # column 5, row 10
        grid = layer.grid()              # numpy array, shape (height, width)
        grid[10, 5] == gid

    GID 0 = empty (no tile)

    The decoder stores whatever number of GIDs the file contains. grid() is
    where the count is checked against width * height.
    ==========================================================================
    """
    name: str                                        # Layer name
    width: int                                       # Width in tiles
    height: int                                      # Height in tiles
    data: TileLayerData                              # Decoded GIDs
    id: int = 0                                      # Unique layer ID
    visible: bool = True                             # Is layer rendered?
    opacity: float = 1.0                             # Transparency
    offsetx: float = 0                               # X pixel offset
    offsety: float = 0                               # Y pixel offset
    tintcolor: Optional[Color] = None                # Color tint
    properties: Optional[PropertyMap] = None

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'TileLayer':
        """Parse tile layer from XML element."""
        data_elem = None
        for child in elem:
            if child.tag == 'data':
                if data_elem is not None:
                    raise SchemaError(f"layer '{elem.get('name')}' has more than one <data>")
                data_elem = child
            elif child.tag != 'properties':
                raise UnknownElement(child.tag, elem.tag)

        if data_elem is None:
            raise SchemaError(f"layer '{elem.get('name')}' has no <data>")

        return cls(
            name=elem.get('name', ''),
            width=uint_attr(elem, 'width'),
            height=uint_attr(elem, 'height'),
            data=TileLayerData.from_xml(data_elem),
            id=uint_attr(elem, 'id', 0),
            visible=bool_attr(elem, 'visible'),
            opacity=float_attr(elem, 'opacity', 1.0),
            offsetx=float_attr(elem, 'offsetx', 0.0),
            offsety=float_attr(elem, 'offsety', 0.0),
            tintcolor=color_attr(elem, 'tintcolor'),
            properties=find_properties(elem),
        )

    @property
    def tile_gids(self) -> np.ndarray:
        return self.data.tile_gids

    def grid(self) -> np.ndarray:
        """
        GIDs as a 2D array indexed [y, x].

        Raises:
        -------
        TileCountMismatch : the data does not hold exactly width * height GIDs
        """
        expected = self.width * self.height
        if len(self.data) != expected:
            raise TileCountMismatch(self.name, expected, len(self.data))
        return self.data.tile_gids.reshape(self.height, self.width)

    def get_tile_gid(self, x: int, y: int) -> int:
        """
        Get the GID of the tile at column x, row y.

        Out of bounds (or past the end of short data) reads as 0, empty.
        """
        if 0 <= x < self.width and 0 <= y < self.height:
            index = y * self.width + x
            if index < len(self.data):
                return int(self.data.tile_gids[index])
        return 0


@dataclass(frozen=True, eq=False)
class ImageLayer:
    """A single image drawn at the layer offset (backgrounds, overlays)."""
    name: str
    id: int = 0
    image: Optional[Image] = None                    # May be empty in Tiled
    visible: bool = True
    opacity: float = 1.0
    offsetx: float = 0
    offsety: float = 0
    properties: Optional[PropertyMap] = None

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'ImageLayer':
        image = None
        for child in elem:
            if child.tag == 'image':
                image = Image.from_xml(child)
            elif child.tag != 'properties':
                raise UnknownElement(child.tag, elem.tag)

        return cls(
            name=elem.get('name', ''),
            id=uint_attr(elem, 'id', 0),
            image=image,
            visible=bool_attr(elem, 'visible'),
            opacity=float_attr(elem, 'opacity', 1.0),
            offsetx=float_attr(elem, 'offsetx', 0.0),
            offsety=float_attr(elem, 'offsety', 0.0),
            properties=find_properties(elem),
        )


Layer = Union[TileLayer, ObjectGroup, ImageLayer]
