"""Typed SVG primitives and the one serializer that turns them into markup.

Layout engines build a tree of these dataclasses; only ``serialize()``
produces text.  Keeping string formatting in one place means every
attribute value and every text node goes through the same escaping:
labels, messages, colors and links all come from query parameters and
are reflected into the document, so none of them may be able to close an
attribute or open an element.

Attribute order follows dataclass field order and ``None`` fields are
omitted, so identical trees always serialize to identical bytes.
"""

from __future__ import annotations

import html
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field, fields
from typing import ClassVar, Union

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Python field name -> SVG attribute name, where they differ.
_ATTR_NAMES = {
    "id_": "id",
    "text_length": "textLength",
    "clip_path": "clip-path",
    "text_anchor": "text-anchor",
    "font_family": "font-family",
    "font_size": "font-size",
    "font_weight": "font-weight",
    "text_rendering": "text-rendering",
    "line_height": "line-height",
    "fill_opacity": "fill-opacity",
    "stop_color": "stop-color",
    "stop_opacity": "stop-opacity",
    "aria_hidden": "aria-hidden",
    "aria_label": "aria-label",
    "shape_rendering": "shape-rendering",
    "xmlns_xlink": "xmlns:xlink",
}

# Code points XML 1.0 does not allow anywhere in a document, even escaped.
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

# Fields that hold children or text rather than attributes.
_CONTENT_FIELDS = frozenset({"children", "content"})

Number = Union[int, float]
AttrValue = Union[str, int, float, bool, None]


@dataclass(frozen=True)
class Title:
    tag: ClassVar[str] = "title"
    content: str


@dataclass(frozen=True)
class Style:
    tag: ClassVar[str] = "style"
    content: str


@dataclass(frozen=True)
class Stop:
    tag: ClassVar[str] = "stop"
    offset: str
    stop_color: str | None = None
    stop_opacity: str | None = None


@dataclass(frozen=True)
class LinearGradient:
    tag: ClassVar[str] = "linearGradient"
    id_: str
    children: tuple[Stop, ...]
    x2: str = "0"
    y2: str = "100%"


@dataclass(frozen=True)
class Rect:
    tag: ClassVar[str] = "rect"
    width: Number
    height: Number
    x: Number | None = None
    y: Number | None = None
    rx: Number | None = None
    fill: str | None = None
    stroke: str | None = None
    id_: str | None = None


@dataclass(frozen=True)
class Path:
    tag: ClassVar[str] = "path"
    d: str
    stroke: str | None = None
    fill: str | None = None


@dataclass(frozen=True)
class Text:
    """A text run in the 10x-scaled text layer (``transform="scale(.1)"``).

    ``x`` is the run's centre and ``text_length`` its width, both already
    multiplied by 10.
    """

    tag: ClassVar[str] = "text"
    content: str
    x: Number
    y: Number
    text_length: Number
    id_: str | None = None
    aria_hidden: str | None = None
    fill: str | None = None
    fill_opacity: str | None = None
    font_weight: str | None = None
    transform: str = "scale(.1)"


@dataclass(frozen=True)
class ClipPath:
    tag: ClassVar[str] = "clipPath"
    id_: str
    children: tuple[Element, ...]


@dataclass(frozen=True)
class Group:
    tag: ClassVar[str] = "g"
    children: tuple[Element, ...]
    clip_path: str | None = None
    aria_hidden: str | None = None
    stroke: str | None = None
    fill: str | None = None
    text_anchor: str | None = None
    font_family: str | None = None
    text_rendering: str | None = None
    font_weight: str | None = None
    font_size: str | None = None
    line_height: str | None = None
    shape_rendering: str | None = None


@dataclass(frozen=True)
class Anchor:
    tag: ClassVar[str] = "a"
    children: tuple[Element, ...]
    href: str
    target: str = "_blank"


@dataclass(frozen=True)
class Svg:
    tag: ClassVar[str] = "svg"
    width: Number
    height: Number
    aria_label: str
    children: tuple[Element, ...] = field(default=())
    xmlns: str = SVG_NS
    xmlns_xlink: str | None = None
    role: str = "img"


Element = Union[
    Title, Style, Stop, LinearGradient, Rect, Path, Text, ClipPath, Group, Anchor, Svg
]


def format_number(value: Number) -> str:
    """Shortest plain decimal: ``20`` for 20.0, ``0.5``, ``45.8``."""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return f"{value:.2f}".rstrip("0").rstrip(".")
    return str(value)


def _attrs(node: Element) -> Iterator[tuple[str, str]]:
    for f in fields(node):
        if f.name in _CONTENT_FIELDS:
            continue
        value: AttrValue = getattr(node, f.name)
        if value is None:
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            text = format_number(value)
        else:
            text = str(value)
        yield _ATTR_NAMES.get(f.name, f.name), text


def _escape(value: str, quote: bool) -> str:
    return html.escape(_XML_ILLEGAL.sub("\ufffd", value), quote=quote)


def _render(node: Element, out: list[str]) -> None:
    attrs = "".join(f' {name}="{_escape(value, quote=True)}"' for name, value in _attrs(node))
    content = getattr(node, "content", None)
    children: Sequence[Element] = getattr(node, "children", ())

    if content is None and not children:
        out.append(f"<{node.tag}{attrs}/>")
        return

    out.append(f"<{node.tag}{attrs}>")
    if content is not None:
        # <style> bodies are fixed CSS, never caller input; emitted verbatim.
        out.append(content if isinstance(node, Style) else _escape(content, quote=False))
    for child in children:
        _render(child, out)
    out.append(f"</{node.tag}>")


def serialize(svg: Svg) -> str:
    out: list[str] = []
    _render(svg, out)
    return "".join(out)
