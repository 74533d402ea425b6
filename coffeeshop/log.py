# coffeeshop/log.py
import logging

from rich.logging import RichHandler


def configure_logging(level: str = "INFO") -> None:
    """Send every log record, uvicorn's included, through a rich console handler."""
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
