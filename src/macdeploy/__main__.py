"""Allow ``python -m macdeploy``."""

import sys

from macdeploy.cli import main

sys.exit(main())
