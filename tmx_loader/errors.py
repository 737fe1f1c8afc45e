"""
Exceptions raised while loading TMX documents.

Every failure surfaces as a subclass of TmxError, so callers only need a
single ``except TmxError`` around load() / load_from_text(). The concrete
classes carry the context needed to locate the problem (property name,
character offset, byte length...) as attributes.
"""

from typing import Optional


class TmxError(Exception):
    """Base class for all loader errors."""


class LoadError(TmxError):
    """The map (or an external tileset) could not be read from disk."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"cannot read '{self.path}': {reason}")


# =============================================================================
# DOCUMENT STRUCTURE
# =============================================================================

class SchemaError(TmxError):
    """The document does not match the TMX grammar."""


class UnknownElement(SchemaError):
    def __init__(self, element: str, parent: str):
        self.element = element
        self.parent = parent
        super().__init__(f"unexpected <{element}> inside <{parent}>")


class MultiplePropertiesBlocks(SchemaError):
    def __init__(self, parent: str):
        self.parent = parent
        super().__init__(f"<{parent}> has more than one <properties> block")


# =============================================================================
# TILE DATA
# =============================================================================

class TileDataError(TmxError):
    """Base class for failures decoding the <data> of a tile layer."""


class EncodingError(TileDataError):
    pass


class DecompressionError(TileDataError):
    pass


class IncompatibleEncodingCompression(TileDataError):
    def __init__(self, encoding: str, compression: str):
        self.encoding = encoding
        self.compression = compression
        super().__init__(
            f"compression '{compression}' is only valid with base64 encoding, "
            f"got encoding '{encoding}'"
        )


class TruncatedTileData(TileDataError):
    def __init__(self, length: int):
        self.length = length
        super().__init__(
            f"tile data is {length} bytes long, not a multiple of 4 "
            f"({length % 4} trailing bytes)"
        )


class MalformedTileData(TileDataError):
    def __init__(self, token: str, offset: Optional[int] = None):
        self.token = token
        self.offset = offset
        where = f" at offset {offset}" if offset is not None else ""
        super().__init__(f"'{token}'{where} is not an unsigned 32-bit tile id")


class TileCountMismatch(TileDataError):
    def __init__(self, layer: str, expected: int, actual: int):
        self.layer = layer
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"layer '{layer}' has {actual} tiles, expected {expected}"
        )


# =============================================================================
# PROPERTIES
# =============================================================================

class PropertyError(TmxError):
    """Base class for failures decoding custom properties."""


class PropertyParseError(PropertyError):
    def __init__(self, field: str, type_tag: str, value: str):
        self.field = field
        self.type_tag = type_tag
        self.value = value
        super().__init__(
            f"property '{field}': cannot parse '{value}' as {type_tag}"
        )


class UnknownPropertyType(PropertyError):
    def __init__(self, tag: str, field: Optional[str] = None):
        self.tag = tag
        self.field = field
        prefix = f"property '{field}': " if field is not None else ""
        super().__init__(f"{prefix}unknown property type '{tag}'")


class DuplicateProperty(PropertyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"property '{name}' was found twice")
