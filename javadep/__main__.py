"""Allow ``python -m javadep``."""

import sys

from .cli import main

sys.exit(main())
