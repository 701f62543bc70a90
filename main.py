"""Run the crossword generator CLI from a source checkout."""

import sys

from bulmaca.cli import main

if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
