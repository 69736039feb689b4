from __future__ import annotations

from interface.cli import bootstrap

bootstrap()

from interface.api import app
from interface.cli import main as cli_main

if __name__ == "__main__":
    raise SystemExit(cli_main())
