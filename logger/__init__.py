import logging
import os
import sys


class CustomExtraLogAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        my_context = kwargs.pop("extra", self.extra["extra"])
        return "[%s] %s" % (my_context, msg), kwargs


def get_logger(name, level=None) -> logging.Logger:
    from config import LOG_FILE, LOG_LEVEL

    FORMAT = "[%(levelname)s  %(name)s %(module)s:%(lineno)s - %(funcName)s() - %(asctime)s]\n\t %(message)s \n"
    TIME_FORMAT = "%d.%m.%Y %I:%M:%S %p"

    level = level or getattr(logging, LOG_LEVEL, logging.DEBUG)

    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        format=FORMAT, datefmt=TIME_FORMAT, level=level, filename=LOG_FILE
    )

    logger_instance = logging.getLogger(name)

    if not logger_instance.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        logger_instance.addHandler(handler)

    logger_instance = CustomExtraLogAdapter(logger_instance, {"extra": None})

    return logger_instance


logger = get_logger(__name__)
