"""Package entry point for ``python -m clueso_sync``.

WHY: Users run the tool as ``python -m clueso_sync align "..."`` without
installing the console script.

HOW: Delegates to the CLI's main() function.
"""

from clueso_sync.cli import main

if __name__ == "__main__":
    main()
