"""Package entry point for ``python -m rsvp_reader``.

WHY: Users run the terminal reader as ``python -m rsvp_reader book.txt``
or start the HTTP service with ``python -m rsvp_reader --serve``.

HOW: Checks sys.argv for the ``--serve`` flag. If present, starts the
uvicorn server. Otherwise, delegates to the CLI's main() function.

RULES:
- ``--serve`` launches the API using RSVP_HOST / RSVP_PORT from config
- Without ``--serve``, falls through to the CLI
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from rsvp_reader.server.app import main as serve_main
        serve_main()
    else:
        from rsvp_reader.cli import main
        main()
