"""
Typed access to XML attributes.

ElementTree hands back every attribute as a string (or None). These helpers
convert them to the Python types used by the dataclasses, raising
SchemaError with the element and attribute name when a value is missing or
does not parse, instead of the bare ValueError int()/float() would give.
"""

import xml.etree.ElementTree as ET
from enum import Enum
from typing import Optional, Type, TypeVar

from .color import Color
from .errors import SchemaError

E = TypeVar('E', bound=Enum)

# Sentinel: "no default given", i.e. the attribute is required
_REQUIRED = object()


def required(elem: ET.Element, name: str) -> str:
    value = elem.get(name)
    if value is None:
        raise SchemaError(f"<{elem.tag}> is missing required attribute '{name}'")
    return value


def _convert(elem: ET.Element, name: str, default, convert, kind: str):
    value = elem.get(name)
    if value is None:
        if default is _REQUIRED:
            raise SchemaError(f"<{elem.tag}> is missing required attribute '{name}'")
        return default
    try:
        return convert(value)
    except ValueError as e:
        raise SchemaError(
            f"<{elem.tag}> attribute '{name}': '{value}' is not a valid {kind}"
        ) from e


def int_attr(elem: ET.Element, name: str, default=_REQUIRED):
    return _convert(elem, name, default, int, 'integer')


def _to_unsigned(value: str) -> int:
    number = int(value)
    if number < 0:
        raise ValueError(value)
    return number


def uint_attr(elem: ET.Element, name: str, default=_REQUIRED):
    """Sizes, ids and counts: negative values are a schema error."""
    return _convert(elem, name, default, _to_unsigned, 'unsigned integer')


def float_attr(elem: ET.Element, name: str, default=_REQUIRED):
    return _convert(elem, name, default, float, 'number')


def bool_attr(elem: ET.Element, name: str, default: bool = True) -> bool:
    """
    Tiled writes booleans as "0"/"1" (visible="0" hides a layer).

    Anything else is rejected rather than guessed.
    """
    def convert(value):
        if value not in ('0', '1'):
            raise ValueError(value)
        return value == '1'

    return _convert(elem, name, default, convert, 'boolean (0 or 1)')


def color_attr(elem: ET.Element, name: str) -> Optional[Color]:
    value = elem.get(name)
    if value is None:
        return None
    try:
        return Color.parse(value)
    except SchemaError as e:
        raise SchemaError(f"<{elem.tag}> attribute '{name}': {e}") from e


def enum_attr(elem: ET.Element, name: str, enum_cls: Type[E], default=_REQUIRED):
    return _convert(elem, name, default, enum_cls, enum_cls.__name__)
