"""Module entrypoint for running the document API server."""

from __future__ import annotations

import logging
import os
import sys

from .config import HOST, PORT
from .server import DependencyError, run


def main() -> None:
    logging.basicConfig(
        level=os.getenv("VOIPSHOP_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        run(HOST, PORT)
    except DependencyError as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
