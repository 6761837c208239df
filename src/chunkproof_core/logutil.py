import logging
from typing import Iterable, Union


DEFAULT_LOGGERS = ("chunkproof.merkle", "chunkproof.sdk", "chunkproof.cli")


class DigestHexFilter(logging.Filter):
    """Render raw bytes arguments (digests, chunks) as lowercase hex."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, tuple):
            record.args = tuple(
                bytes(a).hex() if isinstance(a, (bytes, bytearray)) else a
                for a in record.args
            )
        return True


_FILTER = DigestHexFilter()


def get_logger(name: str) -> logging.Logger:
    lg = logging.getLogger(name)
    if _FILTER not in lg.filters:
        lg.addFilter(_FILTER)
    return lg


def setup_logging(
    level: Union[int, str] = logging.INFO, loggers: Iterable[str] = DEFAULT_LOGGERS
) -> None:
    if isinstance(level, str):
        name = level.upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"unknown log level: {name}")
    logging.basicConfig(level=level)
    for name in loggers:
        get_logger(name).setLevel(level)
