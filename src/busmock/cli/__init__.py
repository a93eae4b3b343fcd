"""
busmock Command-Line Interface
==============================

The `busmock` console script:

- **busmock primitives**: list the mockable primitives and their parameters
- **busmock ports**: list serial ports for the pyserial backend
- **busmock run**: run pytest with the busmock plugin and summarize results

Implemented as a Click group with consistent exit codes (see errors.py).
"""

__all__ = ["busmock", "errors"]
