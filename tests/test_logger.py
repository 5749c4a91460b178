import logging

from goalforest.logger import ROOT_LOGGER_NAME, get_logger, setup_logging


def test_setup_logging_writes_system_and_error_logs(tmp_path):
    root = setup_logging(logs_dir=tmp_path, console_level=logging.CRITICAL)
    try:
        log = get_logger("profile")
        log.info("routine")
        log.error("broken")
        for handler in root.handlers:
            handler.flush()

        assert log.name == f"{ROOT_LOGGER_NAME}.profile"
        assert "routine" in (tmp_path / "system.log").read_text(encoding="utf-8")
        error_text = (tmp_path / "error.log").read_text(encoding="utf-8")
        assert "broken" in error_text
        assert "routine" not in error_text
    finally:
        for handler in list(root.handlers):
            handler.close()
        root.handlers.clear()


def test_logs_follow_a_relocated_data_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("GOALFOREST_LOGS_DIR", raising=False)
    monkeypatch.setenv("GOALFOREST_DATA_DIR", str(tmp_path / "forest"))

    root = setup_logging(console_level=logging.CRITICAL)
    try:
        get_logger("persistent_state").info("state saved")
        for handler in root.handlers:
            handler.flush()
        assert "state saved" in (tmp_path / "forest" / "logs" / "system.log").read_text(encoding="utf-8")
    finally:
        for handler in list(root.handlers):
            handler.close()
        root.handlers.clear()
