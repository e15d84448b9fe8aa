"""Allow ``python -m pluma``."""

import sys

from pluma.cli import main

sys.exit(main())
