"""Glyph metrics: loaded typefaces and text measurement.

Badge geometry is driven by how wide the label and message really are
in the font the browser will draw them with.  A fixed per-character
estimate either clips wide glyphs ("W", "@", CJK) or leaves gaps around
narrow ones ("i", "1"), so widths here come from each font's own
advance-width table via Pillow's FreeType binding.

LOADING
--------
``load_typefaces()`` runs once at startup and returns an immutable
TypefaceRegistry that is passed to the TextWidthResolver; nothing here
is cached in module globals.

Two canonical typefaces are always present:

  verdana    flat, flat-square, plastic and for-the-badge styles
  helvetica  social style (drawn bold)

For each one, an explicitly configured file (FONT_PATHS) wins and must
load, or startup fails with FontConfigError.  Otherwise the usual
system font files are tried in order through Pillow's font search path,
and if none is installed Pillow's embedded default font is used.  The
fallback keeps measurement total: a badge request can never fail on a
missing font, it can only be measured with a less faithful one (which
is logged at WARNING).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from PIL import ImageFont

from hits.core.config import Settings

logger = logging.getLogger(__name__)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont

DEFAULT_FONT_SIZE = 11.0
# Sizes the layout engines measure at (11px everywhere, 10px for-the-badge).
DESIGN_SIZES = (11.0, 10.0)

# Tried in order; bare file names are resolved by Pillow against the
# platform font directories.
FONT_CANDIDATES: dict[str, tuple[str, ...]] = {
    "verdana": (
        "Verdana.ttf",
        "verdana.ttf",
        "DejaVuSans.ttf",
        "LiberationSans-Regular.ttf",
        "Arial.ttf",
    ),
    "helvetica": (
        "Helvetica-Bold.ttf",
        "Arial Bold.ttf",
        "arialbd.ttf",
        "LiberationSans-Bold.ttf",
        "DejaVuSans-Bold.ttf",
        "Helvetica.ttf",
        "Arial.ttf",
    ),
}

EMBEDDED_SOURCE = "<pillow-default>"


class FontConfigError(RuntimeError):
    """Font data is missing or unreadable; the service must not start."""


@dataclass(frozen=True)
class Typeface:
    name: str
    source: str
    fonts: Mapping[float, Font] = field(repr=False, compare=False)

    @property
    def base_size(self) -> float:
        return DEFAULT_FONT_SIZE if DEFAULT_FONT_SIZE in self.fonts else next(iter(self.fonts))


class TypefaceRegistry(Mapping[str, Typeface]):
    """Immutable, insertion-ordered ``name -> Typeface`` mapping."""

    def __init__(self, typefaces: list[Typeface]) -> None:
        if not typefaces:
            raise FontConfigError("no typeface could be loaded")
        self._by_name = MappingProxyType({t.name: t for t in typefaces})

    def __getitem__(self, name: str) -> Typeface:
        return self._by_name[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_name)

    def __len__(self) -> int:
        return len(self._by_name)

    def first(self) -> Typeface:
        return next(iter(self._by_name.values()))


def measure(text: str, typeface: Typeface, font_size: float = DEFAULT_FONT_SIZE) -> float:
    """Width in pixels of ``text`` drawn at ``font_size``.

    Sum of each character's advance width, without kerning, which is how
    the badge text is laid out with ``textLength``.  Sizes that were not
    loaded are scaled linearly from the base size.
    """
    if not text:
        return 0.0
    font = typeface.fonts.get(font_size)
    scale = 1.0
    if font is None:
        base = typeface.base_size
        font = typeface.fonts[base]
        scale = font_size / base
    return sum(font.getlength(ch) for ch in text) * scale


def _load_file(source: str, sizes: tuple[float, ...]) -> dict[float, Font]:
    return {size: ImageFont.truetype(source, size=size) for size in sizes}


def _load_embedded(sizes: tuple[float, ...]) -> dict[float, Font]:
    return {size: ImageFont.load_default(size=size) for size in sizes}


def _load_typeface(
    name: str,
    configured: str | None,
    candidates: tuple[str, ...],
    sizes: tuple[float, ...],
) -> Typeface:
    if configured is not None:
        try:
            fonts = _load_file(configured, sizes)
        except OSError as exc:
            raise FontConfigError(
                f"cannot load font {name!r} from {configured!r}: {exc}"
            ) from exc
        logger.info("Loaded typeface %s from %s", name, configured)
        return Typeface(name=name, source=configured, fonts=MappingProxyType(fonts))

    for candidate in candidates:
        try:
            fonts = _load_file(candidate, sizes)
        except OSError:
            continue
        logger.info("Loaded typeface %s from %s", name, candidate)
        return Typeface(name=name, source=candidate, fonts=MappingProxyType(fonts))

    logger.warning(
        "No font file found for %s (tried %s); using Pillow's embedded font",
        name,
        ", ".join(candidates),
    )
    return Typeface(
        name=name, source=EMBEDDED_SOURCE, fonts=MappingProxyType(_load_embedded(sizes))
    )


def load_typefaces(
    settings: Settings | None = None,
    sizes: tuple[float, ...] = DESIGN_SIZES,
) -> TypefaceRegistry:
    """Build the registry: canonical typefaces first, then any extra names
    configured in FONT_PATHS, in configuration order.

    Raises:
        FontConfigError: a configured font file could not be loaded.
    """
    configured = dict(settings.font_paths) if settings is not None else {}
    typefaces = [
        _load_typeface(name, configured.pop(name, None), candidates, sizes)
        for name, candidates in FONT_CANDIDATES.items()
    ]
    typefaces.extend(
        _load_typeface(name, path, (), sizes) for name, path in configured.items()
    )
    return TypefaceRegistry(typefaces)
