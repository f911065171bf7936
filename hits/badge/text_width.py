from __future__ import annotations

import math

from hits.badge.fonts import DEFAULT_FONT_SIZE, Typeface, TypefaceRegistry, measure

# Narrower than this and the segment rectangles degenerate for empty or
# single-thin-glyph text.
MIN_TEXT_WIDTH = 5


class TextWidthResolver:
    """Turns (text, CSS font-family list) into integer layout widths.

    Resolution of a family list such as ``"Verdana,Geneva,DejaVu Sans,sans-serif"``:

      1. the whole query, lowercased, names a registered typeface exactly;
      2. otherwise the first typeface, in registry order, whose name occurs
         anywhere in the lowercased query;
      3. otherwise the first registered typeface.

    The registry is insertion-ordered, so the same query always resolves
    to the same typeface.
    """

    def __init__(self, registry: TypefaceRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> TypefaceRegistry:
        return self._registry

    def resolve_font(self, font_family: str) -> Typeface:
        query = font_family.strip().lower()
        exact = self._registry.get(query)
        if exact is not None:
            return exact
        for name, typeface in self._registry.items():
            if name in query:
                return typeface
        return self._registry.first()

    def pixel_width(
        self,
        text: str,
        font_family: str,
        font_size: float = DEFAULT_FONT_SIZE,
        letter_spacing: float = 0.0,
    ) -> int:
        """Rendered width of ``text``, rounded up, never below MIN_TEXT_WIDTH.

        Rounds up: an undersized segment clips the last glyph.
        """
        typeface = self.resolve_font(font_family)
        width = measure(text, typeface, font_size) + letter_spacing * len(text)
        return max(math.ceil(width), MIN_TEXT_WIDTH)
