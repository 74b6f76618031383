"""
Feasibility and layout algorithms for CircleFit.
Checks whether grouped circles fit a tray and computes where each one is drawn.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Tuple, Union
import logging

from .circle_record import CircleGroup, CircleRecord, Side


# Tolerance for draw-time bounds checks on float centers
BOUNDS_EPSILON = 1e-9


class ValidationError(ValueError):
    """Raised when tray or spacing values cannot be packed at all."""


def validate_spacing(spacing: float) -> float:
    """Return spacing as float, rejecting negative or non-finite values."""
    try:
        value = float(spacing)
    except (TypeError, ValueError):
        raise ValidationError(f"Spacing must be a number, got {spacing!r}")
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"Spacing must be a non-negative number, got {spacing!r}")
    return value


@dataclass(frozen=True)
class TraySpec:
    """Tray rectangle, in the same units as diameters and spacing."""
    width: float
    height: float

    def __post_init__(self):
        """Reject missing or non-positive dimensions."""
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationError(f"Tray {name} must be a number, got {value!r}")
            if not math.isfinite(value) or value <= 0:
                raise ValidationError(f"Tray {name} must be positive, got {value!r}")


@dataclass(frozen=True)
class LayoutPolicy:
    """Grid limits and draw-time bounds handling for the layout engine."""
    right_max_rows: int = 7
    right_max_columns: int = 20
    left_max_rows: int = 3
    clip_out_of_bounds: bool = False  # Drop circles outside the tray instead of flagging them

    def __post_init__(self):
        for name in ("right_max_rows", "right_max_columns", "left_max_rows"):
            if getattr(self, name) < 1:
                raise ValidationError(f"{name} must be at least 1")


GroupsArg = Union[Mapping[str, CircleGroup], Iterable[CircleGroup]]


def _as_group_list(groups: GroupsArg) -> List[CircleGroup]:
    if isinstance(groups, Mapping):
        return list(groups.values())
    return list(groups)


def order_groups(groups: GroupsArg) -> List[CircleGroup]:
    """Groups by largest member diameter, descending; ties keep input order."""
    return sorted(_as_group_list(groups), key=lambda g: -g.largest_diameter)


@dataclass(frozen=True)
class CheckRequest:
    """Everything one fit check needs, captured at submit time."""
    tray: TraySpec
    spacing: float
    groups: Tuple[CircleGroup, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "spacing", validate_spacing(self.spacing))
        object.__setattr__(self, "groups", tuple(_as_group_list(self.groups)))

    @property
    def circle_count(self) -> int:
        return sum(len(g.circles) for g in self.groups)


@dataclass(frozen=True)
class FitResult:
    """Outcome of the shelf feasibility check."""
    fits: bool
    failed_group: Optional[str] = None
    failed_index: Optional[int] = None  # original_index of the circle that did not fit

    def __bool__(self) -> bool:
        return self.fits


@dataclass(frozen=True)
class ShelfSlot:
    """Simulated shelf position of one circle (x = left edge, y = lower edge, y grows upward)."""
    circle: CircleRecord
    x: float
    y: float
    row: int


@dataclass(frozen=True)
class OutlineRect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class CircleDrawable:
    """One circle ready for a render sink."""
    center_x: float
    center_y: float
    radius: float
    label: int
    group_key: str = ""
    side: Side = Side.LEFT
    in_bounds: bool = True


@dataclass(frozen=True)
class GroupGrid:
    """Grid chosen for one group."""
    key: str
    side: Side
    rows: int
    columns: int
    cell_size: float
    origin_x: float


@dataclass
class LayoutResult:
    """Outline plus drawables produced by the layout engine."""
    outline: OutlineRect
    drawables: List[CircleDrawable] = field(default_factory=list)
    group_grids: List[GroupGrid] = field(default_factory=list)

    @property
    def out_of_bounds(self) -> List[CircleDrawable]:
        return [d for d in self.drawables if not d.in_bounds]


@dataclass
class CheckOutcome:
    fit: FitResult
    layout: LayoutResult


class CircleFitPacker:
    """Shelf feasibility check and side-aware grid layout for grouped circles."""

    def __init__(self, policy: Optional[LayoutPolicy] = None):
        """
        Initialize packer with layout limits.

        Args:
            policy: Grid limits and bounds handling (defaults to LayoutPolicy())
        """
        self.policy = policy or LayoutPolicy()
        self.logger = logging.getLogger(__name__)

    def check(self, request: CheckRequest,
              origin: Tuple[float, float] = (0.0, 0.0)) -> CheckOutcome:
        """
        Run feasibility and layout for one submitted request.

        Args:
            request: Tray, spacing and groups captured at submit time
            origin: Canvas position of the tray's top-left corner

        Returns:
            CheckOutcome with the fit result and the layout
        """
        self.logger.info(f"Checking {request.circle_count} circles in {len(request.groups)} groups "
                         f"on a {request.tray.width:g}x{request.tray.height:g} tray "
                         f"(spacing {request.spacing:g})")
        fit = self.check_fit(request.tray, request.spacing, request.groups)
        layout = self.layout(request.tray, request.spacing, request.groups, origin)
        return CheckOutcome(fit=fit, layout=layout)

    def fits(self, tray: TraySpec, spacing: float, groups: GroupsArg) -> bool:
        """True when the shelf heuristic places every circle of every group."""
        return self.check_fit(tray, spacing, groups).fits

    def check_fit(self, tray: TraySpec, spacing: float, groups: GroupsArg) -> FitResult:
        """
        Shelf-pack each group independently; the first breach fails the whole input.

        A False result only means the heuristic could not place the circles,
        not that no arrangement exists.

        Args:
            tray: Tray rectangle
            spacing: Margin to the tray edge and gap between circles
            groups: Groups keyed by group key, or an iterable of groups

        Returns:
            FitResult naming the failing group and circle when infeasible
        """
        spacing = validate_spacing(spacing)
        for group in order_groups(groups):
            _, failed = self._simulate_shelf(tray, spacing, group)
            if failed is not None:
                self.logger.info(f"Group '{group.key}' does not fit: circle {failed.original_index} "
                                 f"(diameter {failed.diameter:g}) cannot be placed")
                return FitResult(False, group.key, failed.original_index)
        self.logger.info("All circles fit")
        return FitResult(True)

    def shelf_placements(self, tray: TraySpec, spacing: float,
                         group: CircleGroup) -> List[ShelfSlot]:
        """Shelf positions for one group, up to (not including) the first breach."""
        slots, _ = self._simulate_shelf(tray, validate_spacing(spacing), group)
        return slots

    def _simulate_shelf(self, tray: TraySpec, spacing: float,
                        group: CircleGroup) -> Tuple[List[ShelfSlot], Optional[CircleRecord]]:
        slots = []
        x = spacing
        y = tray.height - spacing
        row = 0
        row_max = 0.0

        for circle in group.sorted_circles():
            d = circle.diameter
            if x + d + spacing > tray.width:
                x = spacing
                y -= row_max + spacing
                row_max = 0.0
                row += 1
                if x + d + spacing > tray.width:
                    # Wider than an empty row
                    return slots, circle
            if y - d < spacing:
                return slots, circle
            slots.append(ShelfSlot(circle, x, y - d, row))
            row_max = max(row_max, d)
            x += d + spacing

        return slots, None

    def layout(self, tray: TraySpec, spacing: float, groups: GroupsArg,
               origin: Tuple[float, float] = (0.0, 0.0)) -> LayoutResult:
        """
        Compute the side-aware grid layout.

        Left groups grow rightward from the left edge and right groups grow
        leftward from the right edge; each side keeps its own cursor, so the
        two lanes are independent of the shared shelf used by check_fit.

        Args:
            tray: Tray rectangle
            spacing: Margin to the tray edge and gap between cells
            groups: Groups keyed by group key, or an iterable of groups
            origin: Canvas position of the tray's top-left corner

        Returns:
            LayoutResult with outline, drawables and per-group grids
        """
        spacing = validate_spacing(spacing)
        origin_x, origin_y = origin
        result = LayoutResult(outline=OutlineRect(origin_x, origin_y, tray.width, tray.height))

        cursors = {
            Side.LEFT: origin_x + spacing,
            Side.RIGHT: origin_x + tray.width - spacing,
        }
        start_y = origin_y + tray.height - spacing
        inner = (origin_x + spacing, origin_y + spacing,
                 origin_x + tray.width - spacing, origin_y + tray.height - spacing)

        for group in order_groups(groups):
            if not group.circles:
                continue

            d = group.largest_diameter
            pitch = d + spacing
            rows, cols = self._grid_size(group.side, len(group.circles), d, tray.height, spacing)
            cursor = cursors[group.side]
            direction = 1 if group.side == Side.LEFT else -1

            self.logger.debug(f"Group '{group.key}' ({group.side.value}): {rows}x{cols} grid, "
                              f"cell {pitch:g}, cursor {cursor:g}")
            result.group_grids.append(GroupGrid(group.key, group.side, rows, cols, pitch, cursor))

            for i, circle in enumerate(group.sorted_circles()):
                row, col = divmod(i, cols)
                center_x = cursor + direction * (col * pitch + d / 2)
                # An empty row separates each block of `rows` rows
                center_y = start_y - (row + row // rows) * pitch - d / 2
                in_bounds = self._inside(center_x, center_y, circle.radius, inner)

                if not in_bounds and self.policy.clip_out_of_bounds:
                    self.logger.debug(f"Clipping circle {circle.original_index} outside the tray")
                    continue

                result.drawables.append(CircleDrawable(
                    center_x=center_x,
                    center_y=center_y,
                    radius=circle.radius,
                    label=circle.original_index,
                    group_key=group.key,
                    side=group.side,
                    in_bounds=in_bounds,
                ))

            cursors[group.side] = cursor + direction * (cols * pitch + spacing)

        if result.out_of_bounds:
            self.logger.warning(f"{len(result.out_of_bounds)} circles drawn outside the tray margin")
        return result

    def _grid_size(self, side: Side, count: int, diameter: float,
                   height: float, spacing: float) -> Tuple[int, int]:
        """Rows and columns for one group."""
        fit_rows = max(math.floor((height - spacing) / (diameter + spacing)), 1)

        if side == Side.RIGHT:
            rows = min(fit_rows, self.policy.right_max_rows)
            cols = min(math.ceil(count / rows), self.policy.right_max_columns)
        else:
            rows = min(fit_rows, self.policy.left_max_rows)
            cols = math.ceil(count / rows)

        # Prefer a square-ish grid over a tall narrow one
        if rows > cols:
            rows = cols = math.ceil(math.sqrt(count))

        return rows, cols

    @staticmethod
    def _inside(cx: float, cy: float, radius: float,
                inner: Tuple[float, float, float, float]) -> bool:
        left, top, right, bottom = inner
        return (cx - radius >= left - BOUNDS_EPSILON and cx + radius <= right + BOUNDS_EPSILON and
                cy - radius >= top - BOUNDS_EPSILON and cy + radius <= bottom + BOUNDS_EPSILON)
