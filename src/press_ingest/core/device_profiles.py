"""Named pagination profiles for the preview devices.

Dimensions are CSS pixels at 96 dpi.
"""

import math

from press_ingest.core.errors import UnknownDeviceError
from press_ingest.models.pagination import PaginationConfig

DEVICE_PROFILES: dict[str, PaginationConfig] = {
    # 6 x 9 in, 0.75 in margins
    "laptop": PaginationConfig(
        page_width=576,
        page_height=864,
        margin_top=72,
        margin_bottom=72,
        margin_left=72,
        margin_right=72,
        font_size=16,
        line_height=1.6,
    ),
    # 5.5 x 8.5 in
    "tablet": PaginationConfig(
        page_width=528,
        page_height=816,
        margin_top=64,
        margin_bottom=64,
        margin_left=48,
        margin_right=48,
        font_size=15,
        line_height=1.5,
    ),
    # 3.7 x 6.2 in
    "mobile": PaginationConfig(
        page_width=355,
        page_height=595,
        margin_top=48,
        margin_bottom=48,
        margin_left=32,
        margin_right=32,
        font_size=14,
        line_height=1.5,
    ),
    # 5 x 7.5 in
    "ereader": PaginationConfig(
        page_width=480,
        page_height=720,
        margin_top=56,
        margin_bottom=56,
        margin_left=40,
        margin_right=40,
        font_size=16,
        line_height=1.7,
    ),
}

DEVICE_LABELS: dict[str, str] = {
    "laptop": 'Laptop (6×9")',
    "tablet": 'Tablet (5.5×8.5")',
    "mobile": 'Móvil (3.7×6.2")',
    "ereader": 'eReader (5×7.5")',
}


def available_devices() -> list[str]:
    return list(DEVICE_PROFILES)


def get_profile(name: str) -> PaginationConfig:
    """Look up a profile by (case-insensitive) name."""
    profile = DEVICE_PROFILES.get(name.strip().lower())
    if profile is None:
        raise UnknownDeviceError(name, available_devices())
    return profile


def approx_lines_per_page(config: PaginationConfig) -> int:
    """Uncorrected number of body lines that fit on one page."""
    return math.floor(config.content_height / config.line_height_px)
