"""
Project color palette and hex color validation.
"""
import random
import re

HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")

PROJECT_COLORS = (
    "#ef5350",
    "#ec407a",
    "#ab47bc",
    "#7e57c2",
    "#5c6bc0",
    "#42a5f5",
    "#29b6f6",
    "#26c6da",
    "#26a69a",
    "#66bb6a",
    "#9ccc65",
    "#d4e157",
    "#ffee58",
    "#ffca28",
    "#ffa726",
    "#ff7043",
    "#8d6e63",
    "#bdbdbd",
    "#78909c",
)


def get_random_color() -> str:
    return random.choice(PROJECT_COLORS)


def is_valid_color(value) -> bool:
    """True for ``#RRGGBB`` strings."""
    return isinstance(value, str) and HEX_COLOR_PATTERN.match(value) is not None
