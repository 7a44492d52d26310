"""Allow ``python -m iocgraph``."""

import sys

from iocgraph.cli import main

sys.exit(main())
