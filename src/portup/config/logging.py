"""Logging setup for the command line."""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Route log records to stderr at INFO, or DEBUG for portup loggers when ``verbose``.

    SQLAlchemy's engine logger is held at WARNING in both modes.
    """

    logging.basicConfig(level=logging.INFO, format=_FORMAT, datefmt="%H:%M:%S", force=force)
    logging.getLogger("portup").setLevel(logging.DEBUG if verbose else logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
