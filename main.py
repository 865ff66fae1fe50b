from __future__ import annotations

import sys
from pathlib import Path

# Make sure the 'src' directory is on sys.path so 'rmremember' can be imported
REPO_ROOT = Path(__file__).resolve().parent
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from rmremember.cli import main


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
