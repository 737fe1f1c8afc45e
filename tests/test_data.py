"""
Tests for tile layer data decoding: CSV, base64, compression, inline tiles.
"""

import base64
import gzip
import struct
import xml.etree.ElementTree as ET
import zlib

import numpy as np
import pytest

from conftest import encode_gids
from tmx_loader.data import (
    Compression, Encoding, TileLayerData, assemble_tile_gids, decode_text,
    decompress
)
from tmx_loader.errors import (
    DecompressionError, EncodingError, IncompatibleEncodingCompression,
    MalformedTileData, SchemaError, TruncatedTileData, UnknownElement
)


class TestTextDecoder:
    """decode_text() for each encoding."""

    def test_csv_extracts_digit_runs(self):
        gids = decode_text(Encoding.CSV, "1,2,3,4,\n5,6,7,8")
        assert gids.tolist() == [1, 2, 3, 4, 5, 6, 7, 8]

    def test_csv_ignores_whitespace_and_trailing_commas(self):
        gids = decode_text(Encoding.CSV, "\n  10 ,\t0,\r\n3,,\n")
        assert gids.tolist() == [10, 0, 3]

    def test_csv_accepts_full_u32_range(self):
        # Flip flags live in the high bits
        gids = decode_text(Encoding.CSV, "4294967295,2147483649")
        assert gids.tolist() == [0xFFFFFFFF, 0x80000001]

    def test_csv_value_over_32_bits(self):
        with pytest.raises(MalformedTileData) as exc_info:
            decode_text(Encoding.CSV, "1,4294967296")
        assert exc_info.value.token == "4294967296"
        assert exc_info.value.offset == 2

    def test_base64_returns_raw_bytes(self):
        assert decode_text(Encoding.BASE64, "  AQID\n") == b"\x01\x02\x03"

    def test_base64_invalid_alphabet(self):
        with pytest.raises(EncodingError):
            decode_text(Encoding.BASE64, "AQ*D")

    def test_base64_bad_padding(self):
        with pytest.raises(EncodingError):
            decode_text(Encoding.BASE64, "AQI")

    def test_inline_projects_gids(self):
        assert decode_text(Encoding.INLINE, ["3", "0", "7"]).tolist() == [3, 0, 7]

    def test_inline_rejects_non_numeric_gid(self):
        with pytest.raises(MalformedTileData):
            decode_text(Encoding.INLINE, ["1", "grass"])

    @pytest.mark.parametrize("token", ["1_0", "\u0663", " 5 ", "+5"])
    def test_inline_gid_must_be_ascii_digits(self, token):
        with pytest.raises(MalformedTileData) as exc_info:
            decode_text(Encoding.INLINE, ["1", token])
        assert exc_info.value.token == token


class TestDecompressor:

    def test_none_returns_input_unchanged(self):
        raw = b"\x01\x00\x00\x00"
        assert decompress(Compression.NONE, raw) is raw

    def test_zlib(self):
        assert decompress(Compression.ZLIB, zlib.compress(b"tiles")) == b"tiles"

    def test_gzip(self):
        assert decompress(Compression.GZIP, gzip.compress(b"tiles")) == b"tiles"

    def test_corrupt_zlib_stream(self):
        with pytest.raises(DecompressionError):
            decompress(Compression.ZLIB, b"not zlib at all")

    def test_bad_gzip_header(self):
        with pytest.raises(DecompressionError):
            decompress(Compression.GZIP, zlib.compress(b"tiles"))

    def test_truncated_gzip_stream(self):
        with pytest.raises(DecompressionError):
            decompress(Compression.GZIP, gzip.compress(b"tiles" * 20)[:-12])


class TestAssembler:
    """assemble_tile_gids(): the full pipeline."""

    def test_csv_example(self):
        gids = assemble_tile_gids(Encoding.CSV, Compression.NONE, "1,2,3,4,\n5,6,7,8")
        assert gids.tolist() == [1, 2, 3, 4, 5, 6, 7, 8]

    def test_csv_round_trip(self):
        values = [0, 1, 17, 65535, 0xFFFFFFFF, 42]
        text = ",".join(str(v) for v in values)
        assert assemble_tile_gids(Encoding.CSV, Compression.NONE, text).tolist() == values

    @pytest.mark.parametrize("compression", [Compression.NONE, Compression.ZLIB, Compression.GZIP])
    def test_base64_round_trip(self, compression):
        values = [1, 2, 0, 0x80000005, 300, 0xFFFFFFFF]
        text = encode_gids(values, None if compression is Compression.NONE else compression.value)
        gids = assemble_tile_gids(Encoding.BASE64, compression, text)
        assert gids.tolist() == values

    def test_base64_is_little_endian(self):
        text = base64.b64encode(b"\x01\x00\x00\x00\x00\x01\x00\x00").decode()
        assert assemble_tile_gids(Encoding.BASE64, Compression.NONE, text).tolist() == [1, 256]

    def test_base64_truncated(self):
        text = base64.b64encode(zlib.compress(b"\x01\x00\x00\x00\x02\x00")).decode()
        with pytest.raises(TruncatedTileData) as exc_info:
            assemble_tile_gids(Encoding.BASE64, Compression.ZLIB, text)
        assert exc_info.value.length == 6

    def test_csv_with_compression_fails_before_decompressing(self, monkeypatch):
        def fail(*args):
            raise AssertionError("decompress must not be called")

        monkeypatch.setattr("tmx_loader.data.decompress", fail)
        with pytest.raises(IncompatibleEncodingCompression):
            assemble_tile_gids(Encoding.CSV, Compression.ZLIB, "1,2,3")

    def test_inline_with_compression(self):
        with pytest.raises(IncompatibleEncodingCompression):
            assemble_tile_gids(Encoding.INLINE, Compression.GZIP, ["1"])

    def test_result_is_read_only_uint32(self):
        gids = assemble_tile_gids(Encoding.BASE64, Compression.NONE, encode_gids([1, 2]))
        assert gids.dtype == np.uint32
        with pytest.raises(ValueError):
            gids[0] = 5

    def test_empty_csv(self):
        assert len(assemble_tile_gids(Encoding.CSV, Compression.NONE, "  \n")) == 0


class TestTileLayerDataFromXml:

    def test_csv_element(self):
        data = TileLayerData.from_xml(ET.fromstring('<data encoding="csv">\n1,0,\n0,2\n</data>'))
        assert data.encoding is Encoding.CSV
        assert data.compression is Compression.NONE
        assert data.tile_gids.tolist() == [1, 0, 0, 2]
        assert len(data) == 4

    def test_base64_gzip_element(self):
        elem = ET.fromstring(
            f'<data encoding="base64" compression="gzip">\n   {encode_gids([5, 6, 7], "gzip")}\n  </data>')
        data = TileLayerData.from_xml(elem)
        assert data.compression is Compression.GZIP
        assert data.tile_gids.tolist() == [5, 6, 7]

    def test_inline_element_defaults_missing_gid_to_zero(self):
        elem = ET.fromstring('<data><tile gid="4"/><tile/><tile gid="9"/></data>')
        data = TileLayerData.from_xml(elem)
        assert data.encoding is Encoding.INLINE
        assert data.tile_gids.tolist() == [4, 0, 9]

    def test_csv_element_with_zlib_attribute(self):
        elem = ET.fromstring('<data encoding="csv" compression="zlib">1,2</data>')
        with pytest.raises(IncompatibleEncodingCompression):
            TileLayerData.from_xml(elem)

    def test_unknown_encoding(self):
        with pytest.raises(SchemaError):
            TileLayerData.from_xml(ET.fromstring('<data encoding="hex">0102</data>'))

    def test_unsupported_compression(self):
        raw = struct.pack("<I", 1)
        elem = ET.fromstring(
            f'<data encoding="base64" compression="zstd">{base64.b64encode(raw).decode()}</data>')
        with pytest.raises(SchemaError):
            TileLayerData.from_xml(elem)

    def test_inline_tile_gid_with_underscore(self):
        with pytest.raises(MalformedTileData):
            TileLayerData.from_xml(ET.fromstring('<data><tile gid="1_0"/></data>'))

    @pytest.mark.parametrize("encoding", ["csv", "base64"])
    def test_chunked_data_is_rejected(self, encoding):
        elem = ET.fromstring(
            f'<data encoding="{encoding}"><chunk x="0" y="0" width="2" height="1">1,2</chunk></data>')
        with pytest.raises(UnknownElement) as exc_info:
            TileLayerData.from_xml(elem)
        assert exc_info.value.element == "chunk"
        assert exc_info.value.parent == "data"
