"""
Deterministic colors per entity type.
"""

from typing import Dict, Iterable, List, Optional

from .models import TypeColor


PALETTE: List[TypeColor] = [
    TypeColor(fill='hsl(210 100% 95%)', stroke='hsl(210 100% 50%)', glow='hsl(210 100% 70%)'),  # Blue
    TypeColor(fill='hsl(142 76% 95%)', stroke='hsl(142 76% 45%)', glow='hsl(142 76% 65%)'),  # Green
    TypeColor(fill='hsl(262 83% 95%)', stroke='hsl(262 83% 55%)', glow='hsl(262 83% 75%)'),  # Purple
    TypeColor(fill='hsl(346 87% 95%)', stroke='hsl(346 87% 55%)', glow='hsl(346 87% 75%)'),  # Pink
    TypeColor(fill='hsl(31 91% 95%)', stroke='hsl(31 91% 55%)', glow='hsl(31 91% 75%)'),  # Orange
    TypeColor(fill='hsl(199 89% 95%)', stroke='hsl(199 89% 50%)', glow='hsl(199 89% 70%)'),  # Cyan
    TypeColor(fill='hsl(48 96% 95%)', stroke='hsl(48 96% 45%)', glow='hsl(48 96% 65%)'),  # Yellow
    TypeColor(fill='hsl(280 100% 95%)', stroke='hsl(280 100% 60%)', glow='hsl(280 100% 80%)'),  # Magenta
]


def hash_hue(text: str) -> int:
    """
    Hue in [0, 360) derived from a string.

    Uses the 32-bit ``hash * 31 + code_unit`` rolling hash over UTF-16 code
    units, so the hue matches the one browsers compute for the same type.
    """
    value = 0
    encoded = text.encode('utf-16-le')
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        value = (value * 31 + code_unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return abs(value) % 360


def hashed_color(type_name: str) -> TypeColor:
    hue = hash_hue(type_name)
    return TypeColor(
        fill=f'hsl({hue} 85% 95%)',
        stroke=f'hsl({hue} 70% 50%)',
        glow=f'hsl({hue} 70% 70%)',
    )


class TypeColorPalette:
    """
    Assigns colors to entity types and remembers them.

    The first types in ``type_order`` take the fixed palette; any further type
    gets a hue hashed from its name. Types not in the order are appended the
    first time they are seen. The cache belongs to the palette instance.
    """

    def __init__(self, type_order: Optional[Iterable[str]] = None):
        self._order: List[str] = []
        self._cache: Dict[str, TypeColor] = {}
        for type_name in type_order or []:
            if type_name not in self._order:
                self._order.append(type_name)

    @property
    def type_order(self) -> List[str]:
        return list(self._order)

    def color_for(self, type_name: str) -> TypeColor:
        """Color of one entity type."""
        cached = self._cache.get(type_name)
        if cached is not None:
            return cached

        if type_name not in self._order:
            self._order.append(type_name)
        index = self._order.index(type_name)

        color = PALETTE[index] if index < len(PALETTE) else hashed_color(type_name)
        self._cache[type_name] = color
        return color

    def legend(self) -> Dict[str, TypeColor]:
        """Colors of every known type, in type order."""
        return {type_name: self.color_for(type_name) for type_name in self._order}
