"""Allow running with ``python -m charbuilder``."""

import sys

from .main import main

sys.exit(main())
