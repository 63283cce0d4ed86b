# marketflow/log.py
import logging

from rich.logging import RichHandler


def setup_logging(level: str = "INFO") -> None:
    """Route all marketflow loggers through a rich console handler."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
