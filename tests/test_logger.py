import logging.handlers

from core import logger as logger_module


def test_termdeck_logger_writes_to_the_rotating_log_file():
    handlers = logger_module.logger.handlers
    files = [h for h in handlers if isinstance(h, logging.handlers.RotatingFileHandler)]

    assert logger_module.logger.name == "termdeck"
    assert [h.baseFilename for h in files] == [str(logger_module.LOG_FILE)]
    assert logger_module.logger.propagate is False


def test_load_config_fills_in_the_log_file(tmp_path):
    conf = tmp_path / "logging.conf"
    conf.write_text(
        "[handler_file]\n"
        "args=('%(log_file)s', 'a')\n"
        "[formatter_standard]\n"
        "format=%(asctime)s %(message)s\n",
        encoding="utf-8",
    )

    parser = logger_module._load_config(conf, tmp_path / "out.log")

    assert parser.get("handler_file", "args") == f"('{tmp_path / 'out.log'}', 'a')"
    assert parser.get("formatter_standard", "format") == "%(asctime)s %(message)s"
