"""Allow ``python -m stache``."""

import sys

from stache.cli import main

sys.exit(main())
