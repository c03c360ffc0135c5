# Logging setup shared by the CLI and the API

import logging

from utils.config import CONFIG

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_logger = logging.getLogger("lifeflow")


def configure_logging(debug: bool | None = None) -> None:
    if debug is None:
        debug = CONFIG.get("debug_mode", False)
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format=LOG_FORMAT)


def debug_log(msg: str) -> None:
    _logger.debug(msg)
