"""
Pytest configuration and shared fixtures for tmx_loader tests.
"""

import base64
import gzip
import struct
import zlib

import pytest


MAP_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<map version="1.10" tiledversion="1.10.2" orientation="orthogonal" '
    'renderorder="right-down" width="{width}" height="{height}" '
    'tilewidth="16" tileheight="16" nextobjectid="5"{extra}>\n'
)


def build_map(*children, width=4, height=2, extra=""):
    """Wrap child element strings in a <map> document."""
    return (MAP_HEADER.format(width=width, height=height, extra=extra)
            + "\n".join(children) + "\n</map>\n")


def encode_gids(gids, compression=None):
    """Pack GIDs as Tiled does: little-endian u32, compressed, base64."""
    raw = struct.pack(f"<{len(gids)}I", *gids)
    if compression == "zlib":
        raw = zlib.compress(raw)
    elif compression == "gzip":
        raw = gzip.compress(raw)
    return base64.b64encode(raw).decode("ascii")


@pytest.fixture
def make_map():
    """Factory building a TMX document from child element strings."""
    return build_map


@pytest.fixture
def tileset_xml():
    return (
        '<tileset firstgid="1" name="terrain" tilewidth="16" tileheight="16" '
        'tilecount="8" columns="4">\n'
        '  <image source="terrain.png" width="64" height="32"/>\n'
        '</tileset>'
    )


@pytest.fixture
def csv_layer_xml():
    """Factory for a 4x2 CSV tile layer."""
    def make(name, data="1,2,3,4,\n5,6,7,8"):
        return (f'<layer id="1" name="{name}" width="4" height="2">\n'
                f'  <data encoding="csv">\n{data}\n</data>\n'
                f'</layer>')
    return make


@pytest.fixture
def sample_map_path(tmp_path, tileset_xml, csv_layer_xml):
    """A map on disk with an external tileset next to it."""
    (tmp_path / "objects.tsx").write_text(
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<tileset version="1.10" name="objects" tilewidth="16" tileheight="16" '
        'tilecount="4" columns="2">\n'
        '  <image source="objects.png" width="32" height="32"/>\n'
        '  <tile id="2" type="chest">\n'
        '    <properties><property name="loot" type="int" value="3"/></properties>\n'
        '  </tile>\n'
        '</tileset>\n',
        encoding="utf-8",
    )
    path = tmp_path / "level.tmx"
    path.write_text(
        build_map(
            tileset_xml,
            '<tileset firstgid="9" source="objects.tsx"/>',
            csv_layer_xml("Ground"),
            '<objectgroup id="2" name="Spawns"><object id="1" x="8" y="8"><point/></object></objectgroup>',
        ),
        encoding="utf-8",
    )
    return path
