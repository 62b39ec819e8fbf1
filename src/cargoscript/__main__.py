"""Allow ``python -m cargoscript``."""

import sys

from cargoscript.ui.cli import main

if __name__ == "__main__":
    sys.exit(main())
