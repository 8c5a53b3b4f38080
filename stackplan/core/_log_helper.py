import logging

from .constants import ROOT_PACKAGE_NAME

logger = logging.getLogger(ROOT_PACKAGE_NAME)


def warn(message: str) -> None:
    logger.warning(message)


def debug(message: str) -> None:
    logger.debug(message)
