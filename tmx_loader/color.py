"""
Colors as written by Tiled.

Tiled stores colors as hex strings with an optional leading '#' and an
optional alpha byte in FRONT of the RGB triple:

    #FF0000     opaque red
    80FF0000    half-transparent red (alpha = 0x80)

Note this is #AARRGGBB, not the #RRGGBBAA order used by CSS.
"""

import re
from dataclasses import dataclass

from .errors import SchemaError

# Compiled once, shared read-only by every parse
_COLOR = re.compile(
    r'#?(?P<alpha>[0-9a-fA-F]{2})?'
    r'(?P<red>[0-9a-fA-F]{2})'
    r'(?P<green>[0-9a-fA-F]{2})'
    r'(?P<blue>[0-9a-fA-F]{2})'
)


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int
    a: int = 255    # Opaque unless the alpha byte is given

    @classmethod
    def parse(cls, text: str) -> 'Color':
        """Parse '#AARRGGBB', '#RRGGBB' or the same without '#'."""
        match = _COLOR.fullmatch(text.strip())
        if match is None:
            raise SchemaError(f"'{text}' is not a valid color")

        alpha = match.group('alpha')
        return cls(
            r=int(match.group('red'), 16),
            g=int(match.group('green'), 16),
            b=int(match.group('blue'), 16),
            a=int(alpha, 16) if alpha is not None else 255,
        )

    def as_tuple(self):
        """(r, g, b, a) - the order most graphics libraries expect."""
        return (self.r, self.g, self.b, self.a)
