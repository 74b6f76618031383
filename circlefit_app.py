#!/usr/bin/env python3
"""
CircleFit - Desktop Application
Checks whether grouped circles fit a rectangular tray and draws the layout.
"""

import sys
import tkinter as tk
from pathlib import Path

# Add current directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent))

from circlefit_core.gui import CircleFitGUI

def main():
    """Main entry point for the CircleFit application."""
    root = tk.Tk()
    app = CircleFitGUI(root)
    root.mainloop()

if __name__ == "__main__":
    main()
