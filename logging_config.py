# logging_config.py

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(debug: bool = False):
    """
    Send every log record to the console, one line per record.
    Safe to call more than once; the console handler is only added the first time.
    """
    level = logging.DEBUG if debug else logging.INFO

    logger = logging.getLogger()
    logger.setLevel(level)

    for handler in logger.handlers:
        if getattr(handler, "_pushhook_console", False):
            handler.setLevel(level)
            return

    # Console handler for real-time logs
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    console_handler._pushhook_console = True
    logger.addHandler(console_handler)
