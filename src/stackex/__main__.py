"""Allow ``python -m stackex``."""

import sys

from stackex.cli.main import main

sys.exit(main())
