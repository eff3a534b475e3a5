"""Allow ``python -m validation_shims``."""

import sys

from validation_shims.main import main

if __name__ == "__main__":
    sys.exit(main())
