"""Allow running archflow as ``python -m archflow``."""

import sys

from archflow.cli import main

sys.exit(main())
