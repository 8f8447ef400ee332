import logging

from rich.logging import RichHandler

from utils.config import settings


class PaddedNameFormatter(logging.Formatter):
    name_width = 12  # grows with the longest logger name seen

    def format(self, record):
        PaddedNameFormatter.name_width = max(
            PaddedNameFormatter.name_width, len(record.name)
        )
        original = record.name
        record.name = original.center(PaddedNameFormatter.name_width)
        try:
            return super().format(record)
        finally:
            # the file handler formats the same record afterwards
            record.name = original


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output.

    The terminal is owned by Textual while the app runs, so setting
    STOREFRONT_LOG_FILE additionally mirrors every record into that file.
    """
    if name is None:
        name = "storefront"
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        console_handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        console_handler.setFormatter(PaddedNameFormatter("[%(name)s]  %(message)s"))
        console_handler.setLevel(log_level)
        logger.addHandler(console_handler)

        if settings.log_file:
            file_handler = logging.FileHandler(settings.log_file, encoding="utf-8")
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
            )
            file_handler.setLevel(log_level)
            logger.addHandler(file_handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized.")

    return logger
