"""Module entrypoint.

Allows:
    python -m logdeck
"""

from __future__ import annotations

from logdeck.server.log_server import main

if __name__ == "__main__":
    main()
