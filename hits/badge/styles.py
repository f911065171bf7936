"""Layout engines, one per badge style.

Each engine takes the label/message text and colors, measures the text
through the shared TextWidthResolver, and returns an ``Svg`` tree.  The
segment arithmetic (padding, 10x text layer, label-then-message order)
comes from ``layout.lay_out``; what differs per style is only the
decoration around it:

  flat           rounded (rx=3) clip, faint highlight overlay
  flat-square    same as flat with square corners
  plastic        rounded clip, stronger four-stop bevel, text 0.5px higher
  social         fixed light palette, two separately rounded boxes with a
                 gap and an arrow between them, half-pixel stroke offsets
  for-the-badge  taller, upper-cased, letter-spaced, no overlay or shadow
"""

from __future__ import annotations

import math
from collections.abc import Callable

from hits.badge.layout import (
    BADGE_HEIGHT,
    HELVETICA_FAMILY,
    VERDANA_FAMILY,
    SegmentLayout,
    lay_out,
)
from hits.badge.svg import (
    XLINK_NS,
    ClipPath,
    Group,
    LinearGradient,
    Path,
    Rect,
    Stop,
    Style,
    Svg,
    Text,
    Title,
)
from hits.badge.text_width import TextWidthResolver

LayoutEngine = Callable[[TextWidthResolver, str, str, str, str], Svg]

FONT_SIZE_SCALED = "110"

# Social
SOCIAL_GAP = 6
SOCIAL_RADIUS = 2
SOCIAL_STROKE = "#d5d5d5"
SOCIAL_LABEL_BG = "#fcfcfc"
SOCIAL_MESSAGE_BG = "#fafafa"
SOCIAL_TEXT = "#333"
SOCIAL_HOVER_CSS = "a:hover #llink{fill:url(#b);stroke:#ccc}a:hover #rlink{fill:#4183c4}"

# For-the-badge
FTB_HEIGHT = 28
FTB_PADDING = 12
FTB_FONT_SIZE = 10.0
FTB_LETTER_SPACING = 1.25
FTB_TEXT_Y = 175

_FLAT_OVERLAY = LinearGradient(
    "s",
    (
        Stop("0", stop_color="#bbb", stop_opacity=".1"),
        Stop("1", stop_opacity=".1"),
    ),
)

_PLASTIC_OVERLAY = LinearGradient(
    "a",
    (
        Stop("0", stop_color="#fff", stop_opacity=".7"),
        Stop(".1", stop_color="#aaa", stop_opacity=".1"),
        Stop(".9", stop_color="#000", stop_opacity=".3"),
        Stop("1", stop_color="#000", stop_opacity=".5"),
    ),
)


def _accessible_name(label: str, message: str) -> str:
    return f"{label}: {message}"


def _shadowed_text(
    layout: SegmentLayout,
    label: str,
    message: str,
    *,
    text_y: int,
    shadow_fill: str,
) -> tuple[Text, ...]:
    # Shadow sits 1px (10 scaled units) below the main run.
    shadow_y = text_y + 10
    return (
        Text(
            label,
            x=layout.label_center_scaled,
            y=shadow_y,
            text_length=layout.label_length_scaled,
            aria_hidden="true",
            fill=shadow_fill,
            fill_opacity=".3",
        ),
        Text(
            label,
            x=layout.label_center_scaled,
            y=text_y,
            text_length=layout.label_length_scaled,
            fill="#fff",
        ),
        Text(
            message,
            x=layout.message_center_scaled,
            y=shadow_y,
            text_length=layout.message_length_scaled,
            aria_hidden="true",
            fill=shadow_fill,
            fill_opacity=".3",
        ),
        Text(
            message,
            x=layout.message_center_scaled,
            y=text_y,
            text_length=layout.message_length_scaled,
            fill="#fff",
        ),
    )


def _clipped_badge(
    layout: SegmentLayout,
    label: str,
    message: str,
    label_color: str,
    message_color: str,
    *,
    radius: int,
    overlay: LinearGradient,
    text_y: int,
    shadow_fill: str,
    xlink: bool,
) -> Svg:
    height = BADGE_HEIGHT
    name = _accessible_name(label, message)
    return Svg(
        width=layout.total_width,
        height=height,
        aria_label=name,
        xmlns_xlink=XLINK_NS if xlink else None,
        children=(
            Title(name),
            overlay,
            ClipPath("r", (Rect(layout.total_width, height, rx=radius, fill="#fff"),)),
            Group(
                clip_path="url(#r)",
                children=(
                    Rect(layout.label_width, height, fill=label_color),
                    Rect(
                        layout.message_width,
                        height,
                        x=layout.label_width,
                        fill=message_color,
                    ),
                    Rect(layout.total_width, height, fill=f"url(#{overlay.id_})"),
                ),
            ),
            Group(
                fill="#fff",
                text_anchor="middle",
                font_family=VERDANA_FAMILY,
                text_rendering="geometricPrecision",
                font_size=FONT_SIZE_SCALED,
                children=_shadowed_text(
                    layout, label, message, text_y=text_y, shadow_fill=shadow_fill
                ),
            ),
        ),
    )


def flat(
    resolver: TextWidthResolver,
    label: str,
    message: str,
    label_color: str,
    message_color: str,
) -> Svg:
    layout = lay_out(resolver, label, message, VERDANA_FAMILY)
    return _clipped_badge(
        layout,
        label,
        message,
        label_color,
        message_color,
        radius=3,
        overlay=_FLAT_OVERLAY,
        text_y=140,
        shadow_fill="#010101",
        xlink=True,
    )


def flat_square(
    resolver: TextWidthResolver,
    label: str,
    message: str,
    label_color: str,
    message_color: str,
) -> Svg:
    layout = lay_out(resolver, label, message, VERDANA_FAMILY)
    return _clipped_badge(
        layout,
        label,
        message,
        label_color,
        message_color,
        radius=0,
        overlay=_FLAT_OVERLAY,
        text_y=140,
        shadow_fill="#010101",
        xlink=True,
    )


def plastic(
    resolver: TextWidthResolver,
    label: str,
    message: str,
    label_color: str,
    message_color: str,
) -> Svg:
    layout = lay_out(resolver, label, message, VERDANA_FAMILY)
    return _clipped_badge(
        layout,
        label,
        message,
        label_color,
        message_color,
        radius=3,
        overlay=_PLASTIC_OVERLAY,
        text_y=135,
        shadow_fill="#111",
        xlink=False,
    )


def social(
    resolver: TextWidthResolver,
    label: str,
    message: str,
    label_color: str,
    message_color: str,
) -> Svg:
    """Social style; ``label_color`` and ``message_color`` are ignored."""
    layout = lay_out(resolver, label, message, HELVETICA_FAMILY, gap=SOCIAL_GAP)
    rect_height = BADGE_HEIGHT - 1
    start = layout.message_x
    # Rects are offset by half a pixel so 1px strokes land on whole pixels.
    width = math.ceil(layout.total_width + 0.5)
    name = _accessible_name(label, message)

    return Svg(
        width=width,
        height=BADGE_HEIGHT,
        aria_label=name,
        children=(
            Title(name),
            Style(SOCIAL_HOVER_CSS),
            LinearGradient(
                "a",
                (
                    Stop("0", stop_color="#fcfcfc", stop_opacity="0"),
                    Stop("1", stop_opacity=".1"),
                ),
            ),
            LinearGradient(
                "b",
                (
                    Stop("0", stop_color="#ccc", stop_opacity=".1"),
                    Stop("1", stop_opacity=".1"),
                ),
            ),
            Group(
                stroke=SOCIAL_STROKE,
                children=(
                    Rect(
                        layout.label_width,
                        rect_height,
                        x=0.5,
                        y=0.5,
                        rx=SOCIAL_RADIUS,
                        fill=SOCIAL_LABEL_BG,
                        stroke="none",
                    ),
                    Rect(
                        layout.message_width,
                        rect_height,
                        x=start + 0.5,
                        y=0.5,
                        rx=SOCIAL_RADIUS,
                        fill=SOCIAL_MESSAGE_BG,
                    ),
                    Rect(0.5, 5, x=start, y=7.5, stroke=SOCIAL_MESSAGE_BG),
                    Path(
                        f"M{start + 0.5} 6.5 l-3 3v1 l3 3",
                        stroke=SOCIAL_STROKE,
                        fill=SOCIAL_MESSAGE_BG,
                    ),
                ),
            ),
            Group(
                aria_hidden="true",
                fill=SOCIAL_TEXT,
                text_anchor="middle",
                font_family=HELVETICA_FAMILY,
                text_rendering="geometricPrecision",
                font_weight="700",
                font_size=f"{FONT_SIZE_SCALED}px",
                line_height="14px",
                children=(
                    Rect(
                        layout.label_width,
                        rect_height,
                        x=0.5,
                        y=0.5,
                        rx=SOCIAL_RADIUS,
                        fill="url(#a)",
                        stroke=SOCIAL_STROKE,
                        id_="llink",
                    ),
                    Text(
                        label,
                        x=layout.label_center_scaled,
                        y=150,
                        text_length=layout.label_length_scaled,
                        aria_hidden="true",
                        fill="#fff",
                    ),
                    Text(
                        label,
                        x=layout.label_center_scaled,
                        y=140,
                        text_length=layout.label_length_scaled,
                    ),
                    Text(
                        message,
                        x=layout.message_center_scaled,
                        y=150,
                        text_length=layout.message_length_scaled,
                        aria_hidden="true",
                        fill="#fff",
                    ),
                    Text(
                        message,
                        x=layout.message_center_scaled,
                        y=140,
                        text_length=layout.message_length_scaled,
                        id_="rlink",
                    ),
                ),
            ),
        ),
    )


def for_the_badge(
    resolver: TextWidthResolver,
    label: str,
    message: str,
    label_color: str,
    message_color: str,
) -> Svg:
    label = label.upper()
    message = message.upper()
    layout = lay_out(
        resolver,
        label,
        message,
        VERDANA_FAMILY,
        padding=FTB_PADDING,
        font_size=FTB_FONT_SIZE,
        letter_spacing=FTB_LETTER_SPACING,
    )
    name = _accessible_name(label, message)
    return Svg(
        width=layout.total_width,
        height=FTB_HEIGHT,
        aria_label=name,
        xmlns_xlink=XLINK_NS,
        children=(
            Title(name),
            Group(
                shape_rendering="crispEdges",
                children=(
                    Rect(layout.label_width, FTB_HEIGHT, fill=label_color),
                    Rect(
                        layout.message_width,
                        FTB_HEIGHT,
                        x=layout.label_width,
                        fill=message_color,
                    ),
                ),
            ),
            Group(
                fill="#fff",
                text_anchor="middle",
                font_family=VERDANA_FAMILY,
                text_rendering="geometricPrecision",
                font_size="100",
                children=(
                    Text(
                        label,
                        x=layout.label_center_scaled,
                        y=FTB_TEXT_Y,
                        text_length=layout.label_length_scaled,
                        fill="#fff",
                    ),
                    Text(
                        message,
                        x=layout.message_center_scaled,
                        y=FTB_TEXT_Y,
                        text_length=layout.message_length_scaled,
                        fill="#fff",
                        font_weight="bold",
                    ),
                ),
            ),
        ),
    )
