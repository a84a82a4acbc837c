"""Allow ``python -m slot_checker``."""

import sys

from slot_checker.main import main

sys.exit(main())
