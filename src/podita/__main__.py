"""Allow ``python -m podita``."""

import sys

from podita.cli import main

sys.exit(main())
