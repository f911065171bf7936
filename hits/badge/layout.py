"""Geometry shared by every badge style.

A badge is two segments side by side: label on the left, message on the
right, each as wide as its text plus padding on both sides.  Text is
drawn in a layer scaled down by 10 (``transform="scale(.1)"``) so that
font hinting happens at 110px instead of 11px and stays crisp; every x
coordinate and ``textLength`` fed to that layer is therefore multiplied
by SCALE here, once, instead of in each style.
"""

from __future__ import annotations

from dataclasses import dataclass

from hits.badge.fonts import DEFAULT_FONT_SIZE
from hits.badge.text_width import TextWidthResolver

SCALE = 10
HORIZONTAL_PADDING = 6
BADGE_HEIGHT = 20

VERDANA_FAMILY = "Verdana,Geneva,DejaVu Sans,sans-serif"
HELVETICA_FAMILY = "Helvetica Neue,Helvetica,Arial,sans-serif"


@dataclass(frozen=True)
class SegmentLayout:
    label_text_width: int
    message_text_width: int
    padding: int = HORIZONTAL_PADDING
    gap: int = 0

    @property
    def label_width(self) -> int:
        return self.label_text_width + 2 * self.padding

    @property
    def message_width(self) -> int:
        return self.message_text_width + 2 * self.padding

    @property
    def message_x(self) -> int:
        """Left edge of the message segment."""
        return self.label_width + self.gap

    @property
    def total_width(self) -> int:
        return self.message_x + self.message_width

    # --- text layer (x10) ---

    @property
    def label_center_scaled(self) -> int:
        return self.label_width * SCALE // 2

    @property
    def message_center_scaled(self) -> int:
        return self.message_x * SCALE + self.message_width * SCALE // 2

    @property
    def label_length_scaled(self) -> int:
        return self.label_text_width * SCALE

    @property
    def message_length_scaled(self) -> int:
        return self.message_text_width * SCALE


def lay_out(
    resolver: TextWidthResolver,
    label: str,
    message: str,
    font_family: str,
    *,
    padding: int = HORIZONTAL_PADDING,
    gap: int = 0,
    font_size: float = DEFAULT_FONT_SIZE,
    letter_spacing: float = 0.0,
) -> SegmentLayout:
    return SegmentLayout(
        label_text_width=resolver.pixel_width(
            label, font_family, font_size, letter_spacing
        ),
        message_text_width=resolver.pixel_width(
            message, font_family, font_size, letter_spacing
        ),
        padding=padding,
        gap=gap,
    )
