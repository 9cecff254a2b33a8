"""Entry point for running the preview server as a module.

Usage:
    python -m supersale_preview --root /path/to/checkout
"""

from .main import main

if __name__ == "__main__":
    main()
