"""Allow running Kiln with ``python -m kiln``."""

import sys

from kiln.cli.app import main


if __name__ == "__main__":
    sys.exit(main())
