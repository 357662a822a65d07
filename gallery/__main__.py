"""
Main entry point for running the package as a module.

Usage:
    python -m gallery build /srv/album
    python -m gallery update /srv/album
    python -m gallery serve /srv/album --theme /srv/theme
    python -m gallery create-theme /srv/theme --name dark
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
