"""
TMX Loader - reads Tiled map files (TMX) into immutable Python objects

Requisitos:
    pip install numpy

Usage:
    import tmx_loader

    tiled_map = tmx_loader.load("level1.tmx")
    ground = tiled_map.get_layer_by_name("Ground")
    grid = ground.grid()        # numpy uint32, shape (height, width)

All failures are raised as subclasses of tmx_loader.TmxError.
"""

from .color import Color
from .data import Compression, Encoding, TileLayerData, assemble_tile_gids
from .errors import (
    DecompressionError, DuplicateProperty, EncodingError,
    IncompatibleEncodingCompression, LoadError, MalformedTileData,
    MultiplePropertiesBlocks, PropertyError, PropertyParseError, SchemaError,
    TileCountMismatch, TileDataError, TmxError, TruncatedTileData,
    UnknownElement, UnknownPropertyType
)
from .layers import ImageLayer, Layer, TileLayer
from .map import (
    Map, Orientation, PropertiesBlock, RenderOrder, StaggerAxis, StaggerIndex,
    classify_children, load, load_from_text, read_map_children
)
from .objects import MapObject, ObjectGroup, ObjectShape
from .properties import decode_properties
from .tileset import Image, Tile, Tileset

__version__ = "0.1.0"
__all__ = [
    "load",
    "load_from_text",
    "Map",
    "Orientation",
    "RenderOrder",
    "StaggerAxis",
    "StaggerIndex",
    "PropertiesBlock",
    "read_map_children",
    "classify_children",
    "Tileset",
    "Tile",
    "Image",
    "Layer",
    "TileLayer",
    "TileLayerData",
    "ImageLayer",
    "ObjectGroup",
    "MapObject",
    "ObjectShape",
    "Color",
    "Encoding",
    "Compression",
    "assemble_tile_gids",
    "decode_properties",
    "TmxError",
    "LoadError",
    "SchemaError",
    "UnknownElement",
    "MultiplePropertiesBlocks",
    "TileDataError",
    "EncodingError",
    "DecompressionError",
    "IncompatibleEncodingCompression",
    "TruncatedTileData",
    "MalformedTileData",
    "TileCountMismatch",
    "PropertyError",
    "PropertyParseError",
    "UnknownPropertyType",
    "DuplicateProperty",
]
