"""
GUI for the CircleFit desktop application.
Collects tray and circle input, shows the fit result and paints the layout.
"""

import tkinter as tk
from tkinter import ttk, filedialog, messagebox
from pathlib import Path
import logging
from typing import Optional

from .packer import CircleFitPacker, CheckOutcome, CheckRequest, LayoutResult, ValidationError
from .parser import InputMode, build_request
from .renderer import CircleFitRenderer, MAX_LABEL_FONT_SIZE
from .logger import setup_logging, generate_log_filename, generate_image_filename


# Form values are multiplied by this before packing and drawing
DEFAULT_SCALE = 4
# Offset of the tray outline from the canvas corner, in canvas pixels
CANVAS_MARGIN = 50


def paint_layout(canvas: tk.Canvas, layout: LayoutResult):
    """Clear the canvas and paint the outline, circles and labels."""
    canvas.delete("all")

    outline = layout.outline
    canvas.create_rectangle(outline.x, outline.y, outline.x + outline.width,
                            outline.y + outline.height, outline="black")

    for d in layout.drawables:
        color = "black" if d.in_bounds else "red"
        canvas.create_oval(d.center_x - d.radius, d.center_y - d.radius,
                           d.center_x + d.radius, d.center_y + d.radius, outline=color)
        font_size = max(int(min(d.radius, MAX_LABEL_FONT_SIZE)), 1)
        canvas.create_text(d.center_x, d.center_y, text=str(d.label), fill=color,
                           font=("Arial", font_size))

    bbox = canvas.bbox("all")
    if bbox:
        canvas.configure(scrollregion=(0, 0, bbox[2] + CANVAS_MARGIN, bbox[3] + CANVAS_MARGIN))


class CircleFitGUI:
    """Main GUI application for CircleFit."""

    def __init__(self, root: tk.Tk):
        """Initialize the GUI application."""
        self.root = root
        self.root.title("CircleFit")
        self.root.geometry("1000x800")

        # Setup logging
        setup_logging()
        self.logger = logging.getLogger(__name__)

        # Initialize components
        self.packer = CircleFitPacker()
        self.renderer = CircleFitRenderer()
        self.request: Optional[CheckRequest] = None
        self.outcome: Optional[CheckOutcome] = None

        # Create GUI
        self._create_widgets()

        self.logger.info("CircleFit GUI initialized")

    def _create_widgets(self):
        """Create all GUI widgets."""

        # Main frame
        main_frame = ttk.Frame(self.root, padding="10")
        main_frame.grid(row=0, column=0, sticky=(tk.W, tk.E, tk.N, tk.S))

        # Configure grid weights
        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(0, weight=1)
        main_frame.columnconfigure(1, weight=1)

        row = 0

        # 1. Project Name
        ttk.Label(main_frame, text="Project Name:").grid(row=row, column=0, sticky=tk.W, pady=2)
        self.project_name_var = tk.StringVar(value="circlefit_project")
        ttk.Entry(main_frame, textvariable=self.project_name_var, width=40).grid(
            row=row, column=1, sticky=(tk.W, tk.E), pady=2)
        row += 1

        # 2. Tray Dimensions
        ttk.Label(main_frame, text="Rectangle (w x h):").grid(row=row, column=0, sticky=tk.W, pady=2)
        tray_frame = ttk.Frame(main_frame)
        tray_frame.grid(row=row, column=1, sticky=(tk.W, tk.E), pady=2)

        self.width_var = tk.StringVar()
        self.height_var = tk.StringVar()

        ttk.Label(tray_frame, text="Width:").pack(side=tk.LEFT)
        ttk.Entry(tray_frame, textvariable=self.width_var, width=10).pack(side=tk.LEFT, padx=2)
        ttk.Label(tray_frame, text="Height:").pack(side=tk.LEFT, padx=(10, 0))
        ttk.Entry(tray_frame, textvariable=self.height_var, width=10).pack(side=tk.LEFT, padx=2)
        row += 1

        # 3. Spacing
        ttk.Label(main_frame, text="Spacing Between Circles:").grid(row=row, column=0, sticky=tk.W, pady=2)
        self.spacing_var = tk.StringVar(value="0")
        ttk.Entry(main_frame, textvariable=self.spacing_var, width=10).grid(row=row, column=1, sticky=tk.W, pady=2)
        row += 1

        # 4. Input Format
        ttk.Label(main_frame, text="Input Format:").grid(row=row, column=0, sticky=tk.W, pady=2)
        self.mode_var = tk.StringVar(value=InputMode.GROUPED.value)
        ttk.Combobox(main_frame, textvariable=self.mode_var,
                     values=[mode.value for mode in InputMode],
                     state="readonly", width=15).grid(row=row, column=1, sticky=tk.W, pady=2)
        row += 1

        # 5. Circle list
        ttk.Label(main_frame, text="Circles:").grid(row=row, column=0, sticky=(tk.W, tk.N), pady=2)
        self.circles_text = tk.Text(main_frame, height=8, width=60)
        self.circles_text.grid(row=row, column=1, sticky=(tk.W, tk.E), pady=2)
        row += 1

        # Buttons
        button_frame = ttk.Frame(main_frame)
        button_frame.grid(row=row, column=0, columnspan=2, pady=10)

        ttk.Button(button_frame, text="Check Fit", command=self._check_fit).pack(side=tk.LEFT, padx=5)
        self.save_button = ttk.Button(button_frame, text="Save Image...", command=self._save_image,
                                      state=tk.DISABLED)
        self.save_button.pack(side=tk.LEFT, padx=5)
        row += 1

        # Result display
        self.result_var = tk.StringVar(value="Not calculated")
        self.result_label = ttk.Label(main_frame, textvariable=self.result_var, foreground="blue")
        self.result_label.grid(row=row, column=0, columnspan=2, sticky=tk.W, pady=2)
        row += 1

        # Layout canvas
        canvas_frame = ttk.Frame(main_frame)
        canvas_frame.grid(row=row, column=0, columnspan=2, sticky=(tk.W, tk.E, tk.N, tk.S))
        canvas_frame.columnconfigure(0, weight=1)
        canvas_frame.rowconfigure(0, weight=1)
        main_frame.rowconfigure(row, weight=1)

        self.canvas = tk.Canvas(canvas_frame, background="white")
        x_scroll = ttk.Scrollbar(canvas_frame, orient=tk.HORIZONTAL, command=self.canvas.xview)
        y_scroll = ttk.Scrollbar(canvas_frame, orient=tk.VERTICAL, command=self.canvas.yview)
        self.canvas.configure(xscrollcommand=x_scroll.set, yscrollcommand=y_scroll.set)
        self.canvas.grid(row=0, column=0, sticky=(tk.W, tk.E, tk.N, tk.S))
        y_scroll.grid(row=0, column=1, sticky=(tk.N, tk.S))
        x_scroll.grid(row=1, column=0, sticky=(tk.W, tk.E))

    def _check_fit(self):
        """Validate inputs, run the check and repaint the canvas."""
        try:
            request = build_request(
                self.width_var.get(),
                self.height_var.get(),
                self.spacing_var.get(),
                self.circles_text.get("1.0", tk.END),
                InputMode(self.mode_var.get()),
                DEFAULT_SCALE,
            )
        except ValidationError as e:
            self.logger.error(f"Validation error: {e}")
            messagebox.showerror("Error", str(e))
            return

        self.request = request
        self.outcome = self.packer.check(request, origin=(CANVAS_MARGIN, CANVAS_MARGIN))
        paint_layout(self.canvas, self.outcome.layout)

        fit = self.outcome.fit
        if fit.fits:
            self.result_var.set("All circles can fit inside the rectangle.")
            self.result_label.config(foreground="green")
        else:
            self.result_var.set(f"Circles cannot fit inside the rectangle "
                                f"(group '{fit.failed_group}', circle {fit.failed_index}).")
            self.result_label.config(foreground="red")
        self.save_button.config(state=tk.NORMAL)

    def _save_image(self):
        """Export the current layout with its run log."""
        if not self.outcome or not self.request:
            messagebox.showerror("Error", "Please check the fit first")
            return

        project_name = self.project_name_var.get().strip() or "circlefit_project"
        filename = filedialog.asksaveasfilename(
            title="Save Layout Image",
            initialfile=generate_image_filename(project_name, self.outcome.fit.fits),
            defaultextension=".png",
            filetypes=[("PNG image", "*.png"), ("TIFF image", "*.tif")],
        )
        if not filename:
            return

        output_path = Path(filename)
        log_path = output_path.parent / generate_log_filename(project_name, self.outcome.fit.fits)
        try:
            self.renderer.save_with_log(self.request, self.outcome, output_path, log_path, project_name)
        except Exception as e:
            messagebox.showerror("Export Error", f"Failed to save image: {e}")
            return

        messagebox.showinfo("Export Complete", f"Image saved: {output_path}\nLog: {log_path}")
