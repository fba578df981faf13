import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] (%(threadName)s) %(message)s"


class Log:
    """Process-wide logger for the consumer and its event threads.

    Events are handled on pool threads, so every line carries the thread name
    to keep one event's messages readable when batches interleave.
    """

    _logger: logging.Logger = logging.getLogger("fileflow")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Set the level and attach one stdout handler; repeated calls only change the level."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error with the active exception's traceback. Call from an except block."""
        cls._logger.exception(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
