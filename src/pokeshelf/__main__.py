"""Console entry point: ``python -m pokeshelf``."""

from __future__ import annotations

from pokeshelf.cli import main

if __name__ == "__main__":
    main()
