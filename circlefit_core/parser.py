"""
Input parsing for CircleFit.
Turns form text into circle records, grouped by key, and builds check requests.
"""

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Union

from .circle_record import CircleGroup, CircleRecord, Side
from .packer import CheckRequest, TraySpec, ValidationError, validate_spacing


GROUPED_FIELD_SEPARATOR = " => "
GROUPED_FIELD_COUNT = 5
DEFAULT_GROUP_KEY = "all"

logger = logging.getLogger(__name__)


class InputMode(Enum):
    """Supported circle list formats."""
    GROUPED = "grouped"      # "label => key => diameter => note => true|false" per line
    DIAMETERS = "diameters"  # "50, 40, 30"


@dataclass(frozen=True)
class Parsed:
    circle: CircleRecord


@dataclass(frozen=True)
class Skipped:
    raw: str
    reason: str


ParseResult = Union[Parsed, Skipped]


def _parse_number(text: str) -> float:
    value = float(text.strip())
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {text!r}")
    return value


def parse_grouped_line(line: str, index: int, scale: float = 1.0) -> ParseResult:
    """
    Parse one grouped record.

    Args:
        line: Raw input line
        index: original_index to give the circle if the line parses
        scale: Factor applied to the diameter

    Returns:
        Parsed with the circle, or Skipped with the reason
    """
    stripped = line.strip()
    if not stripped:
        return Skipped(line, "empty line")

    parts = stripped.split(GROUPED_FIELD_SEPARATOR)
    if len(parts) != GROUPED_FIELD_COUNT:
        return Skipped(line, f"expected {GROUPED_FIELD_COUNT} fields, got {len(parts)}")

    try:
        diameter = _parse_number(parts[2]) * scale
    except ValueError:
        return Skipped(line, f"unparsable diameter {parts[2]!r}")
    if diameter <= 0:
        return Skipped(line, f"non-positive diameter {parts[2]!r}")

    side = Side.RIGHT if parts[4].strip() == "true" else Side.LEFT
    return Parsed(CircleRecord(diameter, index, parts[1].strip(), side))


def parse_diameter(token: str, index: int, scale: float = 1.0) -> ParseResult:
    """Parse one entry of a plain diameter list into the implicit left group."""
    if not token.strip():
        return Skipped(token, "empty entry")
    try:
        diameter = _parse_number(token) * scale
    except ValueError:
        return Skipped(token, f"unparsable diameter {token!r}")
    if diameter <= 0:
        return Skipped(token, f"non-positive diameter {token!r}")
    return Parsed(CircleRecord(diameter, index, DEFAULT_GROUP_KEY, Side.LEFT))


def parse_circles(text: str, mode: InputMode = InputMode.GROUPED,
                  scale: float = 1.0) -> List[CircleRecord]:
    """
    Parse circle text, silently dropping malformed entries.

    The running index only advances for entries that parse, so labels are
    1-based positions among valid rows.
    """
    if mode == InputMode.GROUPED:
        entries = text.split("\n")
        parse_entry = parse_grouped_line
    else:
        entries = re.split(r"[,\n]", text)
        parse_entry = parse_diameter

    circles = []
    skipped = 0
    for entry in entries:
        result = parse_entry(entry, len(circles) + 1, scale)
        if isinstance(result, Parsed):
            circles.append(result.circle)
        else:
            skipped += 1
            if result.raw.strip():
                logger.debug(f"Skipping {result.raw!r}: {result.reason}")

    logger.info(f"Parsed {len(circles)} circles ({mode.value} mode), skipped {skipped} entries")
    return circles


def group_circles(circles: Iterable[CircleRecord]) -> Dict[str, CircleGroup]:
    """
    Group circles by key in first-occurrence order.

    A group takes the side of its first circle.
    """
    groups: Dict[str, CircleGroup] = {}
    for circle in circles:
        group = groups.get(circle.group_key)
        if group is None:
            group = groups[circle.group_key] = CircleGroup(circle.group_key, circle.side)
        group.circles.append(circle)
    return groups


def parse_groups(text: str, mode: InputMode = InputMode.GROUPED,
                 scale: float = 1.0) -> Dict[str, CircleGroup]:
    """Parse and group circle text in one step."""
    return group_circles(parse_circles(text, mode, scale))


def _parse_dimension(text: str, name: str) -> float:
    if text is None or not str(text).strip():
        raise ValidationError(f"Tray {name} is required")
    try:
        return _parse_number(str(text))
    except ValueError:
        raise ValidationError(f"Tray {name} must be a number, got {text!r}")


def build_request(width_text: str, height_text: str, spacing_text: str, circles_text: str,
                  mode: InputMode = InputMode.GROUPED, scale: float = 1.0) -> CheckRequest:
    """
    Build a CheckRequest from raw form values.

    Args:
        width_text: Tray width
        height_text: Tray height
        spacing_text: Spacing, empty means 0
        circles_text: Circle list in the given mode
        mode: Input format of circles_text
        scale: Factor applied uniformly to tray, spacing and diameters

    Returns:
        Validated CheckRequest

    Raises:
        ValidationError: If a tray dimension or the spacing is missing or invalid
    """
    if not scale > 0:
        raise ValidationError(f"Scale must be positive, got {scale!r}")

    width = _parse_dimension(width_text, "width")
    height = _parse_dimension(height_text, "height")
    tray = TraySpec(width * scale, height * scale)

    spacing_text = "" if spacing_text is None else str(spacing_text).strip()
    if spacing_text:
        try:
            spacing = _parse_number(spacing_text)
        except ValueError:
            raise ValidationError(f"Spacing must be a number, got {spacing_text!r}")
    else:
        spacing = 0.0
    spacing = validate_spacing(spacing * scale)

    groups = parse_groups(circles_text or "", mode, scale)
    return CheckRequest(tray=tray, spacing=spacing, groups=tuple(groups.values()))
