"""Allows ``python -m pi.watch <command>``."""

import sys

from pi.watch.cli import main

sys.exit(main())
