"""Allow ``python -m treecollect``."""

import sys

from treecollect.cli import main

sys.exit(main())
