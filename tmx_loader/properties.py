"""
Custom properties attached to TMX elements.

Tiled lets the user attach typed key/value pairs to maps, layers, tilesets,
tiles and objects:

    <properties>
        <property name="solid" type="bool" value="true"/>
        <property name="health" type="int" value="100"/>
        <property name="speed" type="float" value="2.5"/>
        <property name="description" value="A wooden door"/>
    </properties>

=============================================================================
SUPPORTED TYPES
=============================================================================

    type attribute      Python value
    ---------------     ------------
    (absent) / string   str (verbatim, no trimming)
    int                 int (signed 64-bit range)
    float               float (decimal, optional exponent)
    bool                bool (exactly "true" or "false")

Any other type is rejected with UnknownPropertyType. Values that don't parse
are rejected with PropertyParseError - an "int" of "abc" never silently
becomes 0.

Names must be unique within one <properties> block. XML itself doesn't
prevent repeating a name, so the decoder checks it (DuplicateProperty).
"""

import logging
import re
import xml.etree.ElementTree as ET
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from .attributes import required
from .errors import (
    DuplicateProperty, MultiplePropertiesBlocks, PropertyParseError,
    UnknownElement, UnknownPropertyType
)

logger = logging.getLogger(__name__)

PropertyValue = Union[str, bool, float, int]
PropertyMap = Mapping[str, PropertyValue]

# (name, type tag, raw text value) as found in the document
RawProperty = Tuple[str, str, str]

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

_INT = re.compile(r'[+-]?[0-9]+')
_FLOAT = re.compile(r'[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')


def _parse_int(text: str) -> int:
    # int() alone would also accept whitespace and '1_000'
    if not _INT.fullmatch(text):
        raise ValueError(text)
    value = int(text)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValueError(text)
    return value


def _parse_float(text: str) -> float:
    if not _FLOAT.fullmatch(text):
        raise ValueError(text)
    return float(text)


def _parse_bool(text: str) -> bool:
    if text == 'true':
        return True
    if text == 'false':
        return False
    raise ValueError(text)


_CONVERTERS = {
    '': str,
    'string': str,
    'int': _parse_int,
    'float': _parse_float,
    'bool': _parse_bool,
}


def decode_property(name: str, type_tag: str, text: str) -> PropertyValue:
    """Convert one raw property value to its Python type."""
    try:
        convert = _CONVERTERS[type_tag]
    except KeyError:
        raise UnknownPropertyType(type_tag, field=name) from None

    try:
        return convert(text)
    except ValueError as e:
        raise PropertyParseError(name, type_tag, text) from e


def decode_properties(raw_properties: Iterable[RawProperty]) -> PropertyMap:
    """
    Build a name -> value mapping from (name, type, value) triples.

    Parameters:
    -----------
    raw_properties : iterable of (str, str, str)
        Properties in document order. An empty type tag means "string".

    Returns:
    --------
    mapping : read-only, property name -> str / bool / float / int

    Raises:
    -------
    DuplicateProperty : a name occurs twice
    UnknownPropertyType : the type tag is not string/int/float/bool
    PropertyParseError : the value does not parse as its declared type
    """
    properties: Dict[str, PropertyValue] = {}
    for name, type_tag, text in raw_properties:
        if name in properties:
            raise DuplicateProperty(name)
        properties[name] = decode_property(name, type_tag, text)
    return MappingProxyType(properties)


def properties_from_xml(elem: ET.Element) -> PropertyMap:
    """Decode a <properties> element."""
    raw = []
    for prop_elem in elem:
        if prop_elem.tag != 'property':
            raise UnknownElement(prop_elem.tag, elem.tag)

        # Multi-line strings are stored as element text instead of value=""
        value = prop_elem.get('value')
        if value is None:
            value = prop_elem.text or ''

        raw.append((required(prop_elem, 'name'), prop_elem.get('type', ''), value))

    return decode_properties(raw)


def find_properties(elem: ET.Element) -> Optional[PropertyMap]:
    """
    Decode the single <properties> child of ``elem``, if any.

    Returns None when the element has no properties block at all.
    """
    blocks = elem.findall('properties')
    if not blocks:
        return None
    if len(blocks) > 1:
        raise MultiplePropertiesBlocks(elem.tag)

    properties = properties_from_xml(blocks[0])
    logger.debug("<%s>: %d properties", elem.tag, len(properties))
    return properties
