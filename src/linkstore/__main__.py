"""Allow ``python -m linkstore``."""

from __future__ import annotations

import sys

from linkstore.cli import main

sys.exit(main())
