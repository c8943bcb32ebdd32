import logging

from ar_session.config import SessionConfig
from ar_session.logging_utils import SessionNameFilter, add_file_handler, setup_logger
from ar_session.worker import FrameLoop


def _drop_file_handlers(logger):
    lib = logging.getLogger("planar_ar")
    for h in [h for h in logger.handlers if isinstance(h, logging.FileHandler)]:
        logger.removeHandler(h)
        lib.removeHandler(h)
        h.close()


def test_setup_logger_is_idempotent():
    first = setup_logger("log_test", "DEBUG")
    count = len(first.handlers)
    second = setup_logger("log_test", "INFO")

    assert first is second
    assert len(second.handlers) == count
    assert second.level == logging.INFO
    assert logging.getLogger("planar_ar").handlers


def test_session_filter_tags_records():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    assert SessionNameFilter("calibrate").filter(record)
    assert record.session == "calibrate"


def test_file_handler_receives_library_messages(tmp_path):
    log_path = tmp_path / "run.log"
    logger = setup_logger("file_test")
    add_file_handler(logger, "file_test", str(log_path))
    try:
        logger.info("session message")
        logging.getLogger("planar_ar.detect_track").info("library message")
    finally:
        _drop_file_handlers(logger)

    text = log_path.read_text()
    assert "[file_test] session message" in text
    assert "library message" in text


def test_library_records_follow_the_latest_session():
    """A second session in the same process retags library diagnostics."""
    setup_logger("alpha")
    setup_logger("beta")

    record = logging.LogRecord("planar_ar.detect_track", logging.INFO, __file__, 1, "msg", None, None)
    for handler in logging.getLogger("planar_ar").handlers:
        assert handler.filter(record)
        assert record.session == "beta"


def test_file_handler_is_added_once_per_path(tmp_path):
    log_path = str(tmp_path / "run.log")
    cfg = SessionConfig(session_name="twice", log_file=log_path)
    try:
        for _ in range(2):
            loop = IdleLoop(cfg)
        files = [h for h in loop.logger.handlers if isinstance(h, logging.FileHandler)]
        lib_files = [h for h in logging.getLogger("planar_ar").handlers
                     if isinstance(h, logging.FileHandler)]
        assert len(files) == 1
        assert len(lib_files) == 1
    finally:
        _drop_file_handlers(logging.getLogger("ar_session.twice"))


class IdleLoop(FrameLoop):
    def process(self, frame):
        return frame.image
