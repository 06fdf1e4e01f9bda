# busfleet/core/logconfig.py
import logging

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Console logging for every `busfleet.*` logger.

    Safe to call more than once (the app factory runs per test client);
    the handler is only attached the first time.
    """
    logger = logging.getLogger("busfleet")
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    if not any(getattr(h, "_busfleet", False) for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        console_handler._busfleet = True
        logger.addHandler(console_handler)

    return logger
