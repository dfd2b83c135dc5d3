"""Allow ``python -m preview_comment``."""

import sys

from preview_comment.main import main

sys.exit(main())
