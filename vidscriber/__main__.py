"""Package entry point for ``python -m vidscriber``.

WHY: Users run the compiler as ``python -m vidscriber speech.json
visual.json`` for CLI mode, or ``python -m vidscriber --serve`` to start
the HTTP API.

HOW: Checks sys.argv for the ``--serve`` flag. If present, launches the
FastAPI app under uvicorn. Otherwise, delegates to the CLI's main().
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from vidscriber.server.app import run_api
        run_api()
    else:
        from vidscriber.cli import main
        main()
