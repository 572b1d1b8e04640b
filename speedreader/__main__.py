"""Package entry point for ``python -m speedreader``.

WHY: Users run the reader as ``python -m speedreader --file notes.txt``
or ``cat notes.txt | python -m speedreader``.

HOW: Delegates to the CLI's main() function.
"""

from speedreader.cli import main

if __name__ == "__main__":
    main()
