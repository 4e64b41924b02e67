"""Allow ``python -m bt2magnet``."""

from __future__ import annotations

from bt2magnet.cli.main import main

if __name__ == "__main__":
    main()
