"""
Tilesets, tiles and image references.

=============================================================================
EMBEDDED vs EXTERNAL TILESETS
=============================================================================

EMBEDDED: the tileset is defined inside the TMX file
    <tileset firstgid="1" name="terrain" tilewidth="32" tileheight="32"
             tilecount="64" columns="8">
        <image source="terrain.png" width="256" height="256"/>
    </tileset>

EXTERNAL (TSX): the TMX only holds a reference
    <tileset firstgid="1" source="terrain.tsx"/>

    The .tsx file has a <tileset> root with the same content minus firstgid,
    which always comes from the map. When a map is loaded from a path, the
    TSX is read relative to the map's directory; when loaded from text there
    is no directory to resolve against and only firstgid/source are filled.

=============================================================================
GLOBAL TILE IDs
=============================================================================

    Tileset A (firstgid=1):   tiles 1-100
    Tileset B (firstgid=101): tiles 101-200

    local tile id = gid - tileset.firstgid
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from .attributes import color_attr, required, uint_attr
from .color import Color
from .errors import LoadError, SchemaError
from .properties import PropertyMap, find_properties

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Image:
    """
    Image reference used by tilesets, tiles and image layers.

    source is relative to the file that contains the <image> element.
    """
    source: str                          # Path to image file
    width: Optional[int] = None          # Image width (pixels)
    height: Optional[int] = None         # Image height (pixels)
    trans: Optional[Color] = None        # Color rendered as transparent

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'Image':
        return cls(
            source=required(elem, 'source'),
            width=uint_attr(elem, 'width', None),
            height=uint_attr(elem, 'height', None),
            trans=color_attr(elem, 'trans'),
        )


@dataclass(frozen=True, eq=False)
class Tile:
    """
    Metadata for one tile of a tileset.

    Only tiles with properties, a type or their own image (image collection
    tilesets) appear in the file. id is LOCAL to the tileset.
    """
    id: int                                          # Local tile ID
    type: str = ""                                   # Tile type/class
    image: Optional[Image] = None                    # Image (collection tilesets)
    properties: Optional[PropertyMap] = None

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'Tile':
        img_elem = elem.find('image')
        return cls(
            id=uint_attr(elem, 'id'),
            # Tiled 1.9 renamed "type" to "class"
            type=elem.get('type', elem.get('class', '')),
            image=Image.from_xml(img_elem) if img_elem is not None else None,
            properties=find_properties(elem),
        )


@dataclass(frozen=True, eq=False)
class Tileset:
    """A collection of tile graphics, addressed from firstgid onwards."""
    firstgid: int                                    # First Global ID
    name: str = ""                                   # Tileset name
    tilewidth: int = 0                               # Tile width in pixels
    tileheight: int = 0                              # Tile height in pixels
    tilecount: int = 0                               # Total number of tiles
    columns: int = 0                                 # Tiles per row
    spacing: int = 0                                 # Pixels between tiles
    margin: int = 0                                  # Pixels around edge
    image: Optional[Image] = None                    # Spritesheet image
    tiles: Mapping[int, Tile] = field(default_factory=lambda: MappingProxyType({}))
    properties: Optional[PropertyMap] = None
    source: Optional[str] = None                     # TSX path (if external)

    @classmethod
    def from_xml(cls, elem: ET.Element, base_dir: Optional[Path] = None) -> 'Tileset':
        """
        Parse a <tileset> element of a map.

        Parameters:
        -----------
        elem : ET.Element
            The <tileset> element found in the TMX
        base_dir : Path, optional
            Directory of the TMX file, used to read external tilesets.
            None keeps external tilesets as unresolved references.
        """
        firstgid = uint_attr(elem, 'firstgid')
        source = elem.get('source')

        if source is None:
            return cls._from_definition(elem, firstgid)

        if base_dir is None:
            return cls(firstgid=firstgid, source=source)

        tsx_root = _read_tsx(base_dir / source)
        if tsx_root.tag != 'tileset':
            raise SchemaError(f"'{source}': expected <tileset> root, got <{tsx_root.tag}>")

        logger.debug("loaded external tileset %s (firstgid=%d)", source, firstgid)
        return cls._from_definition(tsx_root, firstgid, source=source)

    @classmethod
    def _from_definition(cls, elem: ET.Element, firstgid: int,
                         source: Optional[str] = None) -> 'Tileset':
        image = None
        tiles = {}
        for child in elem:
            if child.tag == 'image':
                image = Image.from_xml(child)
            elif child.tag == 'tile':
                tile = Tile.from_xml(child)
                tiles[tile.id] = tile
            elif child.tag not in ('properties', 'tileoffset', 'grid'):
                # Terrains, wangsets and transformations are not supported
                logger.debug("tileset '%s': skipping <%s>", elem.get('name'), child.tag)

        return cls(
            firstgid=firstgid,
            name=required(elem, 'name'),
            tilewidth=uint_attr(elem, 'tilewidth'),
            tileheight=uint_attr(elem, 'tileheight'),
            tilecount=uint_attr(elem, 'tilecount', 0),
            columns=uint_attr(elem, 'columns', 0),
            spacing=uint_attr(elem, 'spacing', 0),
            margin=uint_attr(elem, 'margin', 0),
            image=image,
            tiles=MappingProxyType(tiles),
            properties=find_properties(elem),
            source=source,
        )

    @property
    def is_resolved(self) -> bool:
        """False for an external reference whose TSX was not read."""
        return self.source is None or bool(self.name)

    def contains_gid(self, gid: int) -> bool:
        return self.firstgid <= gid < self.firstgid + self.tilecount


def _read_tsx(path: Path) -> ET.Element:
    try:
        return ET.parse(path).getroot()
    except OSError as e:
        raise LoadError(path, e.strerror or str(e)) from e
    except ET.ParseError as e:
        raise SchemaError(f"'{path}': {e}") from e
