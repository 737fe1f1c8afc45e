"""
Tile layer data decoding.

Turns the <data> element of a tile layer into a flat array of tile GIDs.

=============================================================================
DATA ENCODINGS
=============================================================================

1. XML / inline (no encoding attribute, deprecated by Tiled):
   <data>
       <tile gid="1"/><tile gid="2"/><tile/>...
   </data>
   One element per cell. A <tile/> without gid is an empty cell (GID 0).

2. CSV:
   <data encoding="csv">
       1,2,3,4,
       5,6,7,8
   </data>
   Every run of digits is one GID; commas, newlines and spaces are ignored.

3. Base64:
   <data encoding="base64">
       AQAAAAIAAAA=
   </data>
   Packed little-endian unsigned 32-bit integers, optionally compressed.

=============================================================================
COMPRESSION (Base64 only)
=============================================================================

- none:  raw bytes
- zlib:  zlib-wrapped DEFLATE
- gzip:  gzip container

A compression attribute on CSV or inline data is an error; it is rejected
before anything is decoded.

=============================================================================
PIPELINE
=============================================================================

    text --decode_text--> bytes --decompress--> bytes --frombuffer('<u4')--> GIDs
     (CSV and inline skip the byte stages and yield GIDs directly)

The result is a read-only numpy uint32 array in row-major order
(index = y * width + x). The decoder does not know the layer size, so
checking that there are exactly width * height GIDs is up to the caller -
see TileLayer.grid().
"""

import base64
import binascii
import gzip
import logging
import re
import xml.etree.ElementTree as ET
import zlib
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

import numpy as np

from .errors import (
    DecompressionError, EncodingError, IncompatibleEncodingCompression,
    MalformedTileData, SchemaError, TruncatedTileData, UnknownElement
)

logger = logging.getLogger(__name__)

UINT32_MAX = 0xFFFFFFFF

# Compiled once, shared read-only by every decode
_CSV_DIGITS = re.compile(r'[0-9]+')


class Encoding(Enum):
    """How tile GIDs are written inside <data>."""
    CSV = 'csv'
    BASE64 = 'base64'
    INLINE = 'xml'     # No encoding attribute: one <tile gid=".."/> per cell

    @classmethod
    def from_attribute(cls, value: Optional[str]) -> 'Encoding':
        if value is None:
            return cls.INLINE
        if value in ('csv', 'base64'):
            return cls(value)
        raise SchemaError(f"unsupported tile data encoding '{value}'")


class Compression(Enum):
    """Compression applied to base64 tile data."""
    NONE = 'none'
    ZLIB = 'zlib'
    GZIP = 'gzip'

    @classmethod
    def from_attribute(cls, value: Optional[str]) -> 'Compression':
        if value is None:
            return cls.NONE
        if value in ('zlib', 'gzip'):
            return cls(value)
        raise SchemaError(f"unsupported tile data compression '{value}'")


# =============================================================================
# TEXT DECODER
# =============================================================================

def _to_gid(token: str, offset: Optional[int] = None) -> int:
    # int() alone would also accept whitespace, "1_0" and non-ASCII digits
    if not _CSV_DIGITS.fullmatch(token):
        raise MalformedTileData(token, offset)
    gid = int(token)
    if gid > UINT32_MAX:
        raise MalformedTileData(token, offset)
    return gid


def decode_csv(text: str) -> np.ndarray:
    gids = [_to_gid(match.group(), match.start())
            for match in _CSV_DIGITS.finditer(text)]
    return np.array(gids, dtype=np.uint32)


def decode_base64(text: str) -> bytes:
    try:
        return base64.b64decode(text.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"invalid base64 tile data: {e}") from e


def decode_inline(gids: Iterable[str]) -> np.ndarray:
    return np.array([_to_gid(gid) for gid in gids], dtype=np.uint32)


def decode_text(encoding: Encoding,
                payload: Union[str, Iterable[str]]) -> Union[bytes, np.ndarray]:
    """
    Decode the raw content of a <data> element.

    Parameters:
    -----------
    encoding : Encoding
        Value of the encoding attribute
    payload : str or iterable of str
        The element text for CSV and Base64; for INLINE, the gid attribute
        of each <tile> child in document order

    Returns:
    --------
    np.ndarray of uint32 for CSV and INLINE, raw bytes for BASE64
    """
    if encoding is Encoding.CSV:
        return decode_csv(payload)
    if encoding is Encoding.BASE64:
        return decode_base64(payload)
    return decode_inline(payload)


# =============================================================================
# BYTE DECOMPRESSOR
# =============================================================================

def decompress(compression: Compression, raw: bytes) -> bytes:
    """Undo the compression of base64-decoded tile data."""
    if compression is Compression.NONE:
        return raw

    try:
        if compression is Compression.ZLIB:
            return zlib.decompress(raw)
        return gzip.decompress(raw)
    # gzip reports bad headers as OSError (BadGzipFile) and cut-off
    # streams as EOFError
    except (zlib.error, OSError, EOFError) as e:
        raise DecompressionError(
            f"cannot {compression.value}-decompress tile data: {e}"
        ) from e


# =============================================================================
# TILE-DATA ASSEMBLER
# =============================================================================

def assemble_tile_gids(encoding: Encoding, compression: Compression,
                       payload: Union[str, Iterable[str]]) -> np.ndarray:
    """
    Run the full decode pipeline and return the tile GIDs.

    Returns:
    --------
    np.ndarray : read-only uint32 array, in the order found in the document

    Raises:
    -------
    IncompatibleEncodingCompression : compression used without base64
    EncodingError : invalid base64
    DecompressionError : corrupt zlib/gzip stream
    TruncatedTileData : decoded bytes are not a whole number of GIDs
    MalformedTileData : a CSV or inline value is not a u32
    """
    if encoding is not Encoding.BASE64 and compression is not Compression.NONE:
        raise IncompatibleEncodingCompression(encoding.value, compression.value)

    if encoding is Encoding.BASE64:
        raw = decompress(compression, decode_text(encoding, payload))
        if len(raw) % 4:
            raise TruncatedTileData(len(raw))
        # Explicit little-endian, then native uint32 for the caller
        gids = np.frombuffer(raw, dtype='<u4').astype(np.uint32)
    else:
        gids = decode_text(encoding, payload)

    gids.flags.writeable = False
    return gids


# =============================================================================
# LAYER DATA
# =============================================================================

@dataclass(frozen=True, eq=False)
class TileLayerData:
    """
    Decoded content of a <data> element.

    encoding and compression are kept so tools can report how a layer was
    stored. tile_gids holds one GID per cell, row-major; GID 0 is an empty
    cell. The high bits of a GID carry Tiled's flip flags and are left as-is.
    """
    encoding: Encoding
    compression: Compression
    tile_gids: np.ndarray

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'TileLayerData':
        """Parse and decode a <data> element."""
        encoding = Encoding.from_attribute(elem.get('encoding'))
        compression = Compression.from_attribute(elem.get('compression'))

        if encoding is Encoding.INLINE:
            payload = []
            for child in elem:
                if child.tag != 'tile':
                    raise UnknownElement(child.tag, elem.tag)
                # Tiled writes empty cells as a bare <tile/>
                payload.append(child.get('gid', '0'))
        else:
            # Chunked (infinite map) data is not supported
            for child in elem:
                raise UnknownElement(child.tag, elem.tag)
            payload = elem.text or ''

        gids = assemble_tile_gids(encoding, compression, payload)
        logger.debug("decoded %d tiles (%s, %s)",
                     len(gids), encoding.value, compression.value)
        return cls(encoding=encoding, compression=compression, tile_gids=gids)

    def __len__(self) -> int:
        return len(self.tile_gids)
