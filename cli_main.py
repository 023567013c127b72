#!/usr/bin/env python3
"""
Entry point script for CLI executable.
Used by PyInstaller to build a standalone atr_image_util binary.
"""

import sys
from atr_image_util.__main__ import main

if __name__ == '__main__':
    sys.exit(main())
