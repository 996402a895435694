#!/usr/bin/env python3
"""Allow ``python -m curlent``."""

from __future__ import annotations

import sys

from curlent.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
