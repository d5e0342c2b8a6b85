"""
gyrotap Command-Line Interface
==============================

- **gyrotap**: convert PRG files (or a folder of them) to Gyrospeed TAP
  images, optionally joined into compilation cassettes

The tool is a Click application with help and consistent exit codes.
"""

__all__ = ["gyrotap"]
