"""Module entrypoint for ``python -m paneedit``.

All argument parsing and runtime setup happen in ``paneedit.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
