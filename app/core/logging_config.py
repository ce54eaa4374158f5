import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    """Root logger setup for the service. Safe to call more than once."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)
