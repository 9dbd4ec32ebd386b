"""Print a password hash for SEMINAR_ADMIN_PASSWORD_HASH.

Shortcut for ``python main.py hash-password``; accepts the same ``--stdin``
flag.
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import main as cli


def main(argv=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    return cli.main(["hash-password", *args])


if __name__ == "__main__":
    raise SystemExit(main())
