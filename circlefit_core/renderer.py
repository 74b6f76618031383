"""
Rendering engine for CircleFit.
Paints a computed layout into a Pillow image and exports PNG/TIFF files.
"""

import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Dict, Tuple
from PIL import Image, ImageDraw, ImageFont

from .packer import CheckOutcome, CheckRequest, CircleDrawable, LayoutResult
from .logger import log_check


MAX_LABEL_FONT_SIZE = 40
MIN_LABEL_FONT_SIZE = 6


class CircleFitRenderer:
    """Handles image rendering for CircleFit layouts."""

    def __init__(self):
        """Initialize the renderer."""
        self.logger = logging.getLogger(__name__)
        self._fonts: Dict[int, ImageFont.ImageFont] = {}

    def render(self, layout: LayoutResult, max_dimension: int = 4000,
               margin: int = 20) -> Image.Image:
        """
        Paint the tray outline and every drawable.

        Args:
            layout: Layout to paint
            max_dimension: Maximum pixel dimension of the image (default 4000)
            margin: Blank border around the drawing, in pixels

        Returns:
            RGB image; circles outside the tray margin are drawn in red
        """
        min_x, min_y, max_x, max_y = self._extent(layout)
        extent_width = max_x - min_x
        extent_height = max_y - min_y

        max_current = max(extent_width, extent_height)
        available = max_dimension - 2 * margin - 1
        if max_current > available:
            scale_factor = available / max_current
        else:
            scale_factor = 1.0

        image_width = int(math.ceil(extent_width * scale_factor)) + 2 * margin + 1
        image_height = int(math.ceil(extent_height * scale_factor)) + 2 * margin + 1
        self.logger.info(f"Render scale factor: {scale_factor:.3f}")
        self.logger.info(f"Render dimensions: {image_width}x{image_height}")

        def to_pixels(x: float, y: float) -> Tuple[float, float]:
            return (margin + (x - min_x) * scale_factor, margin + (y - min_y) * scale_factor)

        canvas = Image.new('RGB', (image_width, image_height), color='white')
        draw = ImageDraw.Draw(canvas)

        outline = layout.outline
        x0, y0 = to_pixels(outline.x, outline.y)
        x1, y1 = to_pixels(outline.x + outline.width, outline.y + outline.height)
        draw.rectangle([x0, y0, x1, y1], outline='black', width=2)

        for drawable in layout.drawables:
            self._draw_circle(draw, drawable, to_pixels, scale_factor)

        return canvas

    def save_image(self, layout: LayoutResult, output_path: Path,
                   max_dimension: int = 4000, margin: int = 20) -> Image.Image:
        """
        Render a layout and save it; ``.tif``/``.tiff`` gives an LZW TIFF, anything else PNG.
        """
        output_path = Path(output_path)
        canvas = self.render(layout, max_dimension, margin)
        if output_path.suffix.lower() in ('.tif', '.tiff'):
            canvas.save(output_path, format='TIFF', compression='tiff_lzw', dpi=(300, 300))
        else:
            canvas.save(output_path, format='PNG')
        self.logger.info(f"Layout image saved: {output_path}")
        return canvas

    def save_with_log(self, request: CheckRequest, outcome: CheckOutcome, output_path: Path,
                      log_path: Path, project_name: str, max_dimension: int = 4000):
        """
        Export the layout image and write the run log next to it.

        Args:
            request: The checked request
            outcome: Fit result and layout for the request
            output_path: Image path
            log_path: Path for log file
            project_name: Project name for logging
            max_dimension: Maximum pixel dimension of the image
        """
        start_time = datetime.now()
        output_path = Path(output_path)
        self.logger.info(f"Exporting layout: {output_path}")

        log_args = dict(
            log_path=log_path,
            project_name=project_name,
            timestamp=start_time,
            tray_width=request.tray.width,
            tray_height=request.tray.height,
            spacing=request.spacing,
            num_groups=len(request.groups),
            num_circles=request.circle_count,
            fits=outcome.fit.fits,
            output_path=output_path,
            failed_group=outcome.fit.failed_group,
            failed_index=outcome.fit.failed_index,
        )

        try:
            self.save_image(outcome.layout, output_path, max_dimension)
        except Exception as e:
            self.logger.error(f"Error exporting layout: {e}", exc_info=True)
            # Still log the failed attempt
            log_check(circles_drawn=0, out_of_bounds=0, process_time=0, error=str(e), **log_args)
            raise

        process_time = (datetime.now() - start_time).total_seconds()
        log_check(
            circles_drawn=len(outcome.layout.drawables),
            out_of_bounds=len(outcome.layout.out_of_bounds),
            process_time=process_time,
            **log_args
        )
        self.logger.info(f"Export completed: {output_path} ({len(outcome.layout.drawables)} circles drawn)")

    def _draw_circle(self, draw: ImageDraw.ImageDraw, drawable: CircleDrawable,
                     to_pixels, scale_factor: float):
        cx, cy = to_pixels(drawable.center_x, drawable.center_y)
        radius = drawable.radius * scale_factor
        color = 'black' if drawable.in_bounds else 'red'
        draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], outline=color, width=1)

        # Label with the original input order
        font = self._font(int(min(radius, MAX_LABEL_FONT_SIZE)))
        text = str(drawable.label)
        text_bbox = draw.textbbox((0, 0), text, font=font)
        text_width = text_bbox[2] - text_bbox[0]
        text_height = text_bbox[3] - text_bbox[1]
        draw.text((cx - text_width / 2 - text_bbox[0], cy - text_height / 2 - text_bbox[1]),
                  text, fill=color, font=font)

    def _font(self, size: int) -> ImageFont.ImageFont:
        size = max(size, MIN_LABEL_FONT_SIZE)
        font = self._fonts.get(size)
        if font is None:
            font = self._fonts[size] = ImageFont.load_default(size=size)
        return font

    @staticmethod
    def _extent(layout: LayoutResult) -> Tuple[float, float, float, float]:
        """Bounding box of the outline and every circle, in layout units."""
        outline = layout.outline
        min_x, min_y = outline.x, outline.y
        max_x, max_y = outline.x + outline.width, outline.y + outline.height
        for d in layout.drawables:
            min_x = min(min_x, d.center_x - d.radius)
            min_y = min(min_y, d.center_y - d.radius)
            max_x = max(max_x, d.center_x + d.radius)
            max_y = max(max_y, d.center_y + d.radius)
        return min_x, min_y, max_x, max_y
