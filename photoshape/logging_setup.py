import logging

from photoshape.config import settings


_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    resolved = (level or settings.log_level).upper().strip()
    logging.basicConfig(level=resolved, format=_LOG_FORMAT)
    logging.getLogger("photoshape").setLevel(resolved)
