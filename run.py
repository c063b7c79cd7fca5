from __future__ import annotations

import sys
from pathlib import Path

# Allow running from a checkout without installing the package.
_SRC = Path(__file__).resolve().parent / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from balance_sim.cli import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main())
