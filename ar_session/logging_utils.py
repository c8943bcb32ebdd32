import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(session)s] %(message)s"
LIBRARY_LOGGER = "planar_ar"


class SessionNameFilter(logging.Filter):
    def __init__(self, session_name: str):
        super().__init__()
        self.session_name = session_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.session = self.session_name
        return True


def _stream_handler(session_name: str) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(SessionNameFilter(session_name))
    return handler


def _bind_session(logger: logging.Logger, session_name: str) -> None:
    for handler in logger.handlers:
        for f in handler.filters:
            if isinstance(f, SessionNameFilter):
                f.session_name = session_name


def _has_file_handler(logger: logging.Logger, log_path: str) -> bool:
    target = os.path.abspath(log_path)
    return any(
        isinstance(h, logging.FileHandler) and h.baseFilename == target
        for h in logger.handlers
    )


def setup_logger(session_name: str, level: int | str = logging.INFO) -> logging.Logger:
    logger = logging.getLogger(f"ar_session.{session_name}")
    logger.setLevel(level)

    if not logger.handlers:
        logger.addHandler(_stream_handler(session_name))

    # library diagnostics (OBJ parse warnings, lock/loss) follow the active session
    lib = logging.getLogger(LIBRARY_LOGGER)
    lib.setLevel(level)
    if not lib.handlers:
        lib.addHandler(_stream_handler(session_name))
    _bind_session(lib, session_name)

    return logger


def add_file_handler(logger: logging.Logger, session_name: str, log_path: str) -> None:
    if _has_file_handler(logger, log_path):
        return
    handler = logging.FileHandler(log_path)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(SessionNameFilter(session_name))
    logger.addHandler(handler)

    lib = logging.getLogger(LIBRARY_LOGGER)
    if not _has_file_handler(lib, log_path):
        lib.addHandler(handler)
