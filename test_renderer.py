#!/usr/bin/env python3
"""
Test script for CircleFit image export and run logs.
Renders layouts to temporary PNG/TIFF files and inspects them with Pillow.
"""

import sys
sys.path.insert(0, '.')

import logging
import tempfile
from pathlib import Path
from PIL import Image
from circlefit_core import CircleFitPacker, CircleFitRenderer, InputMode, TraySpec, build_request
from circlefit_core.logger import generate_image_filename, generate_log_filename, setup_logging


def test_empty_layout_draws_outline():
    setup_logging(logging.INFO)
    layout = CircleFitPacker().layout(TraySpec(100, 100), 2, [])

    image = CircleFitRenderer().render(layout, margin=20)
    print(f"Image size: {image.size}")
    assert image.size == (141, 141)
    assert image.mode == 'RGB'
    assert image.getpixel((20, 70)) == (0, 0, 0)
    assert image.getpixel((70, 70)) == (255, 255, 255)


def test_out_of_bounds_circle_is_red():
    request = build_request("100", "100", "2", "50, 50", InputMode.DIAMETERS)
    outcome = CircleFitPacker().check(request)

    image = CircleFitRenderer().render(outcome.layout)
    colors = {color for _, color in image.getcolors(maxcolors=image.width * image.height)}
    assert (255, 0, 0) in colors
    # The red circle pokes out past the tray outline
    assert image.width > 100 + 2 * 20 + 1


def test_large_layout_is_scaled_down():
    layout = CircleFitPacker().layout(TraySpec(10000, 5000), 20, [])

    image = CircleFitRenderer().render(layout, max_dimension=1000)
    assert max(image.size) <= 1001
    assert image.width > 2 * image.height - 50


def test_save_png_and_tiff():
    request = build_request("75", "50", "0.5", "10, 10, 8, 5", InputMode.DIAMETERS, scale=4)
    outcome = CircleFitPacker().check(request)
    renderer = CircleFitRenderer()

    with tempfile.TemporaryDirectory() as tmp:
        png_path = Path(tmp) / "layout.png"
        tif_path = Path(tmp) / "layout.tif"
        renderer.save_image(outcome.layout, png_path)
        renderer.save_image(outcome.layout, tif_path)

        with Image.open(png_path) as img:
            assert img.format == 'PNG'
        with Image.open(tif_path) as img:
            assert img.format == 'TIFF'
            assert img.size == Image.open(png_path).size


def test_save_with_log_reports_failure():
    text = "a => cups => 50 => n => false\nb => cups => 50 => n => false"
    request = build_request("100", "100", "2", text)
    outcome = CircleFitPacker().check(request)
    renderer = CircleFitRenderer()

    with tempfile.TemporaryDirectory() as tmp:
        image_path = Path(tmp) / generate_image_filename("tray", outcome.fit.fits)
        log_path = Path(tmp) / generate_log_filename("tray", outcome.fit.fits)
        renderer.save_with_log(request, outcome, image_path, log_path, "tray")

        assert image_path.exists()
        log_text = log_path.read_text(encoding='utf-8')
        print(log_text)
        assert "Result: DOES NOT FIT" in log_text
        assert "Group: cups" in log_text
        assert "Circle: 2" in log_text
        assert "Circles Drawn: 2" in log_text
        assert "Outside Tray Margin: 1" in log_text


def test_generated_filenames():
    assert generate_log_filename("tray", False).endswith("_nofit.log")
    assert generate_log_filename("tray", True).endswith("_fits.log")
    assert generate_image_filename("tray", True, ".tif").endswith("_fits.tif")
    assert generate_image_filename("tray", False).startswith("tray_")


if __name__ == "__main__":
    test_empty_layout_draws_outline()
    test_out_of_bounds_circle_is_red()
    test_large_layout_is_scaled_down()
    test_save_png_and_tiff()
    test_save_with_log_reports_failure()
    test_generated_filenames()
    print("✅ Renderer tests passed")
