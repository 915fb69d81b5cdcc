import logging

LOG_FORMAT = "%(asctime)s %(name)s => %(message)s"


def configure_logging(debug: bool = False) -> None:
    """
    Send gio logs to stderr, at DEBUG level when ``debug`` is set.
    """
    level = logging.DEBUG if debug else logging.WARNING

    logger = logging.getLogger("gio")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
