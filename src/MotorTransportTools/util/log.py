import logging


def setup_logging(level: int = logging.INFO,
                  log_file: str | None = None) -> logging.Logger:
    """
    Configure the package logger to write to stderr and, optionally, a file.

    Calling this more than once replaces the handlers added previously.

    Args:
        level (int): The logging level
        log_file (str, None): A file to also write the log to

    Returns:
        logging.Logger: The configured logger
    """
    logger = logging.getLogger('MotorTransportTools')
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
