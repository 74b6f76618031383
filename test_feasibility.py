#!/usr/bin/env python3
"""
Test script for the CircleFit shelf feasibility check.
"""

import sys
sys.path.insert(0, '.')

import logging
import pytest
from circlefit_core import CircleFitPacker, CircleGroup, CircleRecord, Side, TraySpec, ValidationError
from circlefit_core.logger import setup_logging


MIXED_DIAMETERS = [30, 25, 20, 20, 15, 10, 10, 5]


def make_group(key, diameters, side=Side.LEFT, start=1):
    """Build a group whose circles are numbered from start in list order."""
    circles = [CircleRecord(d, start + i, key, side) for i, d in enumerate(diameters)]
    return CircleGroup(key, side, circles)


def test_two_large_circles_do_not_fit():
    """100x100 tray, spacing 2: the second 50 needs a row that is only 46 high."""
    setup_logging(logging.INFO)
    packer = CircleFitPacker()
    group = make_group("all", [50, 50])

    result = packer.check_fit(TraySpec(100, 100), 2, [group])
    print(f"Result: {result}")
    assert result.fits is False
    assert not result
    assert result.failed_group == "all"
    assert result.failed_index == 2
    assert packer.fits(TraySpec(100, 100), 2, [group]) is False


def test_four_circles_fit_larger_tray():
    packer = CircleFitPacker()
    tray = TraySpec(200, 200)
    group = make_group("all", [50, 50, 50, 50])

    assert packer.fits(tray, 2, [group]) is True
    slots = packer.shelf_placements(tray, 2, group)
    assert [s.row for s in slots] == [0, 0, 0, 1]


def test_empty_input_fits():
    packer = CircleFitPacker()
    assert packer.fits(TraySpec(10, 10), 2, []) is True
    assert packer.fits(TraySpec(10, 10), 2, {}) is True
    assert packer.check_fit(TraySpec(10, 10), 0, [CircleGroup("empty", Side.LEFT)]).fits


def test_one_failing_group_fails_all():
    packer = CircleFitPacker()
    groups = {
        "small": make_group("small", [10, 10]),
        "huge": make_group("huge", [150], Side.RIGHT, start=3),
    }

    result = packer.check_fit(TraySpec(100, 100), 2, groups)
    assert result.fits is False
    assert result.failed_group == "huge"
    assert result.failed_index == 3


def test_groups_are_checked_independently():
    """Each group restarts at the top-left corner of the tray."""
    packer = CircleFitPacker()
    tray = TraySpec(100, 100)
    groups = [make_group("a", [90]), make_group("b", [90], Side.RIGHT, start=2)]

    assert packer.fits(tray, 2, groups) is True
    assert packer.fits(tray, 2, [make_group("ab", [90, 90])]) is False


def test_circle_wider_than_tray_does_not_fit():
    packer = CircleFitPacker()
    tray = TraySpec(100, 100)

    assert packer.fits(tray, 2, [make_group("g", [97])]) is False
    assert packer.fits(tray, 2, [make_group("g", [96])]) is True


def test_fits_is_deterministic():
    packer = CircleFitPacker()
    tray = TraySpec(80, 60)
    groups = [make_group("g", MIXED_DIAMETERS)]

    results = {packer.fits(tray, 3, groups) for _ in range(5)}
    assert len(results) == 1


def test_check_does_not_reorder_input():
    packer = CircleFitPacker()
    group = make_group("g", [10, 30, 20])
    packer.fits(TraySpec(100, 100), 2, [group])
    assert [c.original_index for c in group.circles] == [1, 2, 3]


def test_growing_tray_never_breaks_a_fit():
    packer = CircleFitPacker()
    groups = [make_group("g", MIXED_DIAMETERS)]

    for height in range(20, 140, 9):
        seen_fit = False
        for width in range(20, 240, 7):
            fits = packer.fits(TraySpec(width, height), 2, groups)
            assert not (seen_fit and not fits), f"fit lost at {width}x{height}"
            seen_fit = seen_fit or fits

    for width in range(20, 240, 11):
        seen_fit = False
        for height in range(20, 140, 3):
            fits = packer.fits(TraySpec(width, height), 2, groups)
            assert not (seen_fit and not fits), f"fit lost at {width}x{height}"
            seen_fit = seen_fit or fits


def test_shrinking_spacing_never_breaks_a_fit():
    packer = CircleFitPacker()
    tray = TraySpec(90, 70)
    groups = [make_group("g", MIXED_DIAMETERS)]

    seen_fit = False
    for spacing in range(12, -1, -1):
        fits = packer.fits(tray, spacing, groups)
        assert not (seen_fit and not fits), f"fit lost at spacing {spacing}"
        seen_fit = seen_fit or fits
    assert seen_fit


@pytest.mark.parametrize("width, height, spacing", [
    (100, 100, 2),
    (200, 200, 2),
    (75, 120, 4),
    (300, 40, 1),
])
def test_feasible_shelves_stay_inside_margin(width, height, spacing):
    packer = CircleFitPacker()
    tray = TraySpec(width, height)
    group = make_group("g", MIXED_DIAMETERS)

    if not packer.fits(tray, spacing, [group]):
        pytest.skip("heuristic reports no fit for this tray")

    slots = packer.shelf_placements(tray, spacing, group)
    assert len(slots) == len(group.circles)
    for slot in slots:
        assert slot.y >= spacing
        assert slot.x >= spacing
        assert slot.x + slot.circle.diameter <= width - spacing


def test_negative_spacing_is_rejected():
    packer = CircleFitPacker()
    with pytest.raises(ValidationError):
        packer.fits(TraySpec(10, 10), -1, [])


if __name__ == "__main__":
    test_two_large_circles_do_not_fit()
    test_four_circles_fit_larger_tray()
    test_empty_input_fits()
    test_one_failing_group_fails_all()
    test_groups_are_checked_independently()
    test_circle_wider_than_tray_does_not_fit()
    test_fits_is_deterministic()
    test_check_does_not_reorder_input()
    test_growing_tray_never_breaks_a_fit()
    test_shrinking_spacing_never_breaks_a_fit()
    test_negative_spacing_is_rejected()
    print("✅ Feasibility tests passed")
