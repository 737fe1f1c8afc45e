#!/usr/bin/env python3

"""
TMX Loader - print a summary of a Tiled map

Usage:
    python -m tmx_loader <map.tmx>
"""

import sys

from .errors import TmxError
from .layers import ImageLayer, TileLayer
from .map import load
from .objects import ObjectGroup


def describe(tiled_map):
    """Yield the summary lines for a loaded map."""
    yield (f"Map {tiled_map.width}x{tiled_map.height} "
           f"({tiled_map.orientation.value}, {tiled_map.renderorder.value}), "
           f"tiles {tiled_map.tilewidth}x{tiled_map.tileheight}, TMX {tiled_map.version}")

    if tiled_map.properties:
        yield f"Properties: {dict(tiled_map.properties)}"

    yield f"Tilesets: {len(tiled_map.tilesets)}"
    for tileset in tiled_map.tilesets:
        name = tileset.name or f"<unresolved {tileset.source}>"
        yield f"  [{tileset.firstgid}] {name} ({tileset.tilecount} tiles)"

    # Bottom to top, the order a renderer draws them
    yield f"Layers: {len(tiled_map.layers)}"
    for layer in tiled_map.layers:
        if isinstance(layer, TileLayer):
            yield (f"  layer '{layer.name}' {layer.width}x{layer.height}, "
                   f"{len(layer.data)} tiles ({layer.data.encoding.value}, "
                   f"{layer.data.compression.value})")
        elif isinstance(layer, ObjectGroup):
            yield f"  objectgroup '{layer.name}', {len(layer.objects)} objects"
        elif isinstance(layer, ImageLayer):
            source = layer.image.source if layer.image else "no image"
            yield f"  imagelayer '{layer.name}' ({source})"


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print(__doc__)
        return 1

    try:
        tiled_map = load(argv[0])
    except TmxError as e:
        print(f"Error: {e}")
        return 1

    for line in describe(tiled_map):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
