"""Package entry point for ``python -m speed_reader``.

WHY: Users run the terminal reader as ``python -m speed_reader file.txt``
and the reading window as ``python -m speed_reader --gui``.

HOW: Checks sys.argv for the ``--gui`` flag. If present, launches the
tkinter window. Otherwise, delegates to the CLI's main() function.

RULES:
- ``--gui`` flag launches the tkinter window
- Without ``--gui``, falls through to the CLI
"""

import sys

if __name__ == "__main__":
    if "--gui" in sys.argv:
        from speed_reader.gui import main as gui_main
        gui_main()
    else:
        from speed_reader.cli import main
        main()
