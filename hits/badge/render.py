"""Badge facade: the single entry point from the HTTP layer into the engine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from hits.badge import styles
from hits.badge.svg import Anchor, Svg, Title, serialize
from hits.badge.text_width import TextWidthResolver

SVG_CONTENT_TYPE = "image/svg+xml;charset=utf-8"

DEFAULT_LABEL = "Hits"
DEFAULT_LABEL_COLOR = "#555"
DEFAULT_MESSAGE_COLOR = "#007ec6"


class BadgeStyle(str, Enum):
    FLAT = "flat"
    FLAT_SQUARE = "flat-square"
    PLASTIC = "plastic"
    SOCIAL = "social"
    FOR_THE_BADGE = "for-the-badge"


_ENGINES: dict[BadgeStyle, styles.LayoutEngine] = {
    BadgeStyle.FLAT: styles.flat,
    BadgeStyle.FLAT_SQUARE: styles.flat_square,
    BadgeStyle.PLASTIC: styles.plastic,
    BadgeStyle.SOCIAL: styles.social,
    BadgeStyle.FOR_THE_BADGE: styles.for_the_badge,
}

# Every style must have an engine; fail at import, not on the first request.
_missing = set(BadgeStyle) - set(_ENGINES)
if _missing:
    raise RuntimeError(f"no layout engine for badge styles: {sorted(s.value for s in _missing)}")


@dataclass(frozen=True)
class BadgeRequest:
    message: str
    label: str = DEFAULT_LABEL
    style: BadgeStyle = BadgeStyle.FLAT
    label_color: str = DEFAULT_LABEL_COLOR
    message_color: str = DEFAULT_MESSAGE_COLOR
    link: str | None = None
    # Accepted for shields.io compatibility; no engine draws them yet.
    extra_link: str | None = None
    logo: str | None = None
    logo_color: str | None = None


@dataclass(frozen=True)
class RenderedBadge:
    body: str
    content_type: str = SVG_CONTENT_TYPE


def _with_link(svg: Svg, href: str) -> Svg:
    # Title stays outside the anchor so screen readers still announce it first.
    titles = tuple(c for c in svg.children if isinstance(c, Title))
    body = tuple(c for c in svg.children if not isinstance(c, Title))
    return replace(svg, children=(*titles, Anchor(children=body, href=href)))


def build_badge(request: BadgeRequest, resolver: TextWidthResolver) -> Svg:
    engine = _ENGINES[request.style]
    svg = engine(
        resolver,
        request.label,
        request.message,
        request.label_color,
        request.message_color,
    )
    if request.link:
        svg = _with_link(svg, request.link)
    return svg


def render_badge(request: BadgeRequest, resolver: TextWidthResolver) -> RenderedBadge:
    return RenderedBadge(body=serialize(build_badge(request, resolver)))
