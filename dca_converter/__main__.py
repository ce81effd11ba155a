"""Package entry point for ``python -m dca_converter``.

WHY: Users run the converter as ``python -m dca_converter -i in.webm
-o out.dca -j info.json``. Python's ``-m`` flag looks for ``__main__.py``
inside the package and executes it.

HOW: Delegates straight to the CLI's main() function.
"""

from dca_converter.cli import main

if __name__ == "__main__":
    main()
