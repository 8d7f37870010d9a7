import logging
import os

LOGGER_NAME = "filewatcher"
LOG_FILENAME = "file-watcher.log"


def setup_logger(name=LOGGER_NAME, log_dir=None, log_filename=LOG_FILENAME, level=logging.INFO, console=True):
    """
    Set up and return a logger with console and (optionally) file handlers.

    Module loggers (``filewatcher.dispatcher`` etc.) propagate to this one.

    Args:
        name (str): The logger name.
        log_dir (str): Directory for the log file, or None for no file.
        log_filename (str): Log file name.
        level (int | str): Logging level.
        console (bool): Whether to add a console handler.

    Returns:
        logging.Logger: The configured logger.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear out any existing handlers.
    logger.handlers = []

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(log_dir, log_filename), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger
