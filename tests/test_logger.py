import logging

import logger


def test_setup_logging_once(tmp_path, monkeypatch):
    monkeypatch.setattr(logger, "_configured", False)
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        logger.setup_logging(log_dir=tmp_path, level="DEBUG")
        added = [h for h in root.handlers if h not in before]
        assert len(added) == 2
        assert (tmp_path / "app.log").exists()

        logger.setup_logging(log_dir=tmp_path)
        assert len([h for h in root.handlers if h not in before]) == 2
    finally:
        root.setLevel(level)
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
