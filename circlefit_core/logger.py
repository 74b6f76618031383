"""
Logging system for CircleFit.
Handles console logging setup and per-check run logs with timestamps.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional


def setup_logging(log_level: int = logging.INFO) -> None:
    """Setup basic logging configuration."""
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def log_check(log_path: Path, project_name: str, timestamp: datetime,
              tray_width: float, tray_height: float, spacing: float,
              num_groups: int, num_circles: int, fits: bool,
              circles_drawn: int, out_of_bounds: int, output_path: Path,
              process_time: float, failed_group: Optional[str] = None,
              failed_index: Optional[int] = None, error: Optional[str] = None) -> None:
    """
    Log complete check information to file.

    Args:
        log_path: Path to log file
        project_name: Name of the project
        timestamp: Start timestamp
        tray_width: Tray width in layout units
        tray_height: Tray height in layout units
        spacing: Spacing in layout units
        num_groups: Number of circle groups
        num_circles: Number of parsed circles
        fits: Feasibility result
        circles_drawn: Number of circles in the exported image
        out_of_bounds: Number of drawn circles outside the tray margin
        output_path: Path to exported image
        process_time: Processing time in seconds
        failed_group: Group that did not fit, if any
        failed_index: Label of the circle that did not fit, if any
        error: Error message if any
    """

    log_content = f"""CircleFit - Check Log
{'=' * 50}

Project Information:
    Project Name: {project_name}
    Timestamp: {timestamp.strftime('%Y-%m-%d %H:%M:%S')}
    Result: {"FITS" if fits else "DOES NOT FIT"}

Input Parameters:
    Tray Dimensions: {tray_width:g} x {tray_height:g}
    Spacing: {spacing:g}
    Groups: {num_groups}
    Circles: {num_circles}

"""

    if not fits and failed_group is not None:
        log_content += f"""Fit Failure:
    Group: {failed_group}
    Circle: {failed_index}

"""

    log_content += f"""Output Information:
    Output Path: {output_path.name}
    Circles Drawn: {circles_drawn}
    Outside Tray Margin: {out_of_bounds}

Process Information:
    Processing Time: {process_time:.2f} seconds
    Completion Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}

"""

    if error:
        log_content += f"""Error Information:
    Error: {error}
    Status: FAILED

"""

    # Write to log file
    try:
        with open(log_path, 'w', encoding='utf-8') as f:
            f.write(log_content)
    except OSError as e:
        logger = logging.getLogger(__name__)
        logger.error(f"Failed to write log file {log_path}: {e}")


def generate_log_filename(project_name: str, fits: bool) -> str:
    """
    Generate standardized log filename.

    Args:
        project_name: Name of the project
        fits: Feasibility result of the check

    Returns:
        Formatted log filename
    """
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    suffix = 'fits' if fits else 'nofit'
    return f"{project_name}_{timestamp}_{suffix}.log"


def generate_image_filename(project_name: str, fits: bool, extension: str = "png") -> str:
    """Generate standardized layout image filename."""
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    suffix = 'fits' if fits else 'nofit'
    return f"{project_name}_{timestamp}_{suffix}.{extension.lstrip('.')}"
