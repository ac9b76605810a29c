import importlib
import logging
import logging.handlers


def _reset_root():
    root = logging.getLogger()
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)


def test_configure_logging_writes_rotating_file(tmp_path, monkeypatch):
    log_file = tmp_path / "backoffice.log"
    monkeypatch.setenv("LOG_FILE", str(log_file))
    monkeypatch.setenv("LOG_LEVEL", "debug")

    import backoffice_app.logging as logging_mod

    importlib.reload(logging_mod)
    saved = logging.getLogger().handlers[:]
    _reset_root()
    try:
        logging_mod.configure_logging()
        logging_mod.configure_logging()
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        rotating = [
            h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(rotating) == 1
        assert rotating[0].maxBytes == 1_000_000
        assert rotating[0].backupCount == 3

        logging_mod.get_logger("backoffice.test").info("PO created")
        logging_mod.flush_logs()
        assert "[INFO] backoffice.test: PO created" in log_file.read_text()
    finally:
        _reset_root()
        for handler in saved:
            logging.getLogger().addHandler(handler)


def test_configure_logging_without_file(monkeypatch):
    monkeypatch.delenv("LOG_FILE", raising=False)

    import backoffice_app.logging as logging_mod

    importlib.reload(logging_mod)
    saved = logging.getLogger().handlers[:]
    _reset_root()
    try:
        logging_mod.configure_logging()
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)
    finally:
        _reset_root()
        for handler in saved:
            logging.getLogger().addHandler(handler)


def test_sql_logging_quiet_by_default(monkeypatch):
    monkeypatch.delenv("LOG_FILE", raising=False)
    monkeypatch.delenv("LOG_SQL", raising=False)

    import backoffice_app.logging as logging_mod

    importlib.reload(logging_mod)
    saved = logging.getLogger().handlers[:]
    _reset_root()
    try:
        logging_mod.configure_logging()
        assert logging.getLogger("django.db.backends").level == logging.WARNING
    finally:
        _reset_root()
        for handler in saved:
            logging.getLogger().addHandler(handler)
