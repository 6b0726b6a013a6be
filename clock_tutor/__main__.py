from __future__ import annotations

import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    When this module is executed as a script (``python clock_tutor/__main__.py``)
    the package is not importable by name, so the parent directory is inserted
    into ``sys.path`` before the absolute import below.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root_str = str(pkg_dir.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


if __package__:
    # python -m clock_tutor
    from .app import run
else:
    _ensure_repo_root_on_path()
    from clock_tutor.app import run


def main() -> int:
    """Entry point for running the tutor from the command line."""
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
