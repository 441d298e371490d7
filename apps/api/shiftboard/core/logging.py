import logging
import sys


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Setup application logging"""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logger = logging.getLogger("shiftboard")
    logger.setLevel(log_level)
    return logger
