"""
The <map> element and the load() entry points.

=============================================================================
CHILD ELEMENTS
=============================================================================

The children of <map> come in one document-ordered list with different tags:

    <map ...>
        <properties>...</properties>      at most one
        <tileset .../>                    any number
        <layer>...</layer>                \
        <objectgroup>...</objectgroup>     > layers, in paint order
        <imagelayer>...</imagelayer>      /
    </map>

Loading happens in two steps:

1. read_map_children() turns each child element into a MapChild value by
   its tag name. Any other tag is rejected (UnknownElement), so unsupported
   content such as layer groups is reported instead of silently lost.

2. classify_children() walks that list once and sorts it into tilesets,
   layers and properties. Layers of all three kinds share one list and keep
   their relative document order - the first one is drawn at the bottom, no
   matter how tilesets or properties are interleaved with them. A second
   <properties> block is an error (MultiplePropertiesBlocks).
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .attributes import color_attr, enum_attr, int_attr, required, uint_attr
from .color import Color
from .errors import LoadError, MultiplePropertiesBlocks, SchemaError, UnknownElement
from .layers import ImageLayer, Layer, TileLayer
from .objects import ObjectGroup
from .properties import PropertyMap, properties_from_xml
from .tileset import Tileset

logger = logging.getLogger(__name__)


# =============================================================================
# HEADER ENUMS
# =============================================================================

class Orientation(Enum):
    ORTHOGONAL = 'orthogonal'
    ISOMETRIC = 'isometric'
    STAGGERED = 'staggered'
    HEXAGONAL = 'hexagonal'


class RenderOrder(Enum):
    """Which corner tile rendering starts from."""
    RIGHT_DOWN = 'right-down'
    RIGHT_UP = 'right-up'
    LEFT_DOWN = 'left-down'
    LEFT_UP = 'left-up'


class StaggerAxis(Enum):
    X = 'x'
    Y = 'y'


class StaggerIndex(Enum):
    ODD = 'odd'
    EVEN = 'even'


# =============================================================================
# CHILD CLASSIFIER
# =============================================================================

@dataclass(frozen=True, eq=False)
class PropertiesBlock:
    """A <properties> child of <map>, before classification."""
    properties: Optional[PropertyMap]


MapChild = Union[TileLayer, ObjectGroup, ImageLayer, PropertiesBlock, Tileset]


def read_map_children(root: ET.Element,
                      base_dir: Optional[Path] = None) -> List[MapChild]:
    """
    Parse every child of <map>, in document order.

    Parameters:
    -----------
    root : ET.Element
        The <map> element
    base_dir : Path, optional
        Directory external tilesets are resolved against
    """
    children: List[MapChild] = []
    for elem in root:
        if elem.tag == 'tileset':
            children.append(Tileset.from_xml(elem, base_dir))
        elif elem.tag == 'layer':
            children.append(TileLayer.from_xml(elem))
        elif elem.tag == 'objectgroup':
            children.append(ObjectGroup.from_xml(elem))
        elif elem.tag == 'imagelayer':
            children.append(ImageLayer.from_xml(elem))
        elif elem.tag == 'properties':
            children.append(PropertiesBlock(properties_from_xml(elem)))
        else:
            raise UnknownElement(elem.tag, root.tag)
    return children


def classify_children(children: Iterable[MapChild]
                      ) -> Tuple[List[Tileset], List[Layer], Optional[PropertyMap]]:
    """
    Split the map children into (tilesets, layers, properties).

    Raises:
    -------
    MultiplePropertiesBlocks : more than one PropertiesBlock in ``children``
    """
    tilesets: List[Tileset] = []
    layers: List[Layer] = []
    properties: Optional[PropertyMap] = None
    seen_properties = False     # an empty block still counts

    for child in children:
        if isinstance(child, Tileset):
            tilesets.append(child)
        elif isinstance(child, (TileLayer, ObjectGroup, ImageLayer)):
            layers.append(child)
        elif isinstance(child, PropertiesBlock):
            if seen_properties:
                raise MultiplePropertiesBlocks('map')
            seen_properties = True
            properties = child.properties
        else:
            raise TypeError(f"not a map child: {child!r}")

    logger.debug("classified %d tilesets, %d layers", len(tilesets), len(layers))
    return tilesets, layers, properties


# =============================================================================
# MAP
# =============================================================================

@dataclass(frozen=True, eq=False)
class Map:
    """
    A loaded Tiled map.

    Usage:
        tiled_map = load("level1.tmx")
        for layer in tiled_map.layers:          # bottom to top
            if isinstance(layer, TileLayer):
                grid = layer.grid()
    """
    version: str                                     # TMX format version
    orientation: Orientation
    width: int                                       # Map width in tiles
    height: int                                      # Map height in tiles
    tilewidth: int                                   # Tile width in pixels
    tileheight: int                                  # Tile height in pixels
    renderorder: RenderOrder = RenderOrder.RIGHT_DOWN
    tiledversion: str = ""                           # Tiled editor version
    hexsidelength: Optional[int] = None              # Hexagonal maps only
    staggeraxis: Optional[StaggerAxis] = None        # Staggered/hexagonal only
    staggerindex: Optional[StaggerIndex] = None
    nextobjectid: Optional[int] = None
    backgroundcolor: Optional[Color] = None
    tilesets: Tuple[Tileset, ...] = ()
    layers: Tuple[Layer, ...] = ()                   # Paint order
    properties: Optional[PropertyMap] = None

    @classmethod
    def from_xml(cls, root: ET.Element, base_dir: Optional[Path] = None) -> 'Map':
        """Assemble a Map from the <map> root element."""
        if root.tag != 'map':
            raise SchemaError(f"expected <map> root element, got <{root.tag}>")

        tilesets, layers, properties = classify_children(
            read_map_children(root, base_dir))

        return cls(
            version=required(root, 'version'),
            orientation=enum_attr(root, 'orientation', Orientation),
            width=uint_attr(root, 'width'),
            height=uint_attr(root, 'height'),
            tilewidth=uint_attr(root, 'tilewidth'),
            tileheight=uint_attr(root, 'tileheight'),
            renderorder=enum_attr(root, 'renderorder', RenderOrder,
                                  RenderOrder.RIGHT_DOWN),
            tiledversion=root.get('tiledversion', ''),
            hexsidelength=int_attr(root, 'hexsidelength', None),
            staggeraxis=enum_attr(root, 'staggeraxis', StaggerAxis, None),
            staggerindex=enum_attr(root, 'staggerindex', StaggerIndex, None),
            nextobjectid=uint_attr(root, 'nextobjectid', None),
            backgroundcolor=color_attr(root, 'backgroundcolor'),
            tilesets=tuple(tilesets),
            layers=tuple(layers),
            properties=properties,
        )

    def get_tileset_for_gid(self, gid: int) -> Optional[Tileset]:
        """
        Find which tileset a GID belongs to.

        A GID belongs to the tileset with the largest firstgid <= gid.
        GID 0 (empty) belongs to none.
        """
        found = None
        for tileset in self.tilesets:
            if tileset.firstgid <= gid and (found is None or tileset.firstgid > found.firstgid):
                found = tileset
        return found

    def get_layer_by_name(self, name: str) -> Optional[Layer]:
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None


# =============================================================================
# ENTRY POINTS
# =============================================================================

def _parse(content: Union[str, bytes], base_dir: Optional[Path]) -> Map:
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise SchemaError(f"malformed XML: {e}") from e

    tiled_map = Map.from_xml(root, base_dir)
    logger.info("loaded %dx%d %s map: %d tilesets, %d layers",
                tiled_map.width, tiled_map.height, tiled_map.orientation.value,
                len(tiled_map.tilesets), len(tiled_map.layers))
    return tiled_map


def load_from_text(content: Union[str, bytes]) -> Map:
    """
    Load a map from an in-memory TMX document.

    External tilesets cannot be resolved without a directory and are kept
    as references (firstgid and source only).

    Raises:
    -------
    TmxError : any subclass, the document is not a valid map
    """
    return _parse(content, None)


def load(path: Union[str, Path]) -> Map:
    """
    Load a TMX file from disk.

    Parameters:
    -----------
    path : str or Path
        Path to the .tmx file. External tilesets are read relative to it.

    Raises:
    -------
    LoadError : the file (or an external tileset) cannot be read
    TmxError : any other subclass, the document is not a valid map
    """
    path = Path(path)
    try:
        content = path.read_bytes()
    except OSError as e:
        raise LoadError(path, e.strerror or str(e)) from e

    logger.debug("read %d bytes from %s", len(content), path)
    return _parse(content, path.parent)
