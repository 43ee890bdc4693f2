import logging

from pqbench.config import DEFAULT_DSN, load_settings
from pqbench.engine import DEFAULT_QUERY_TEMPLATE
from pqbench.logging_config import setup_logging


def test_defaults(monkeypatch):
    for var in ("PQBENCH_DSN", "PQBENCH_QUERY_TEMPLATE", "PQBENCH_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)

    settings = load_settings(dotenv=False)

    assert settings.dsn == DEFAULT_DSN
    assert settings.query_template == DEFAULT_QUERY_TEMPLATE
    assert settings.log_file is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PQBENCH_DSN", "postgresql://bench@db:5432/tsdb")
    monkeypatch.setenv("PQBENCH_QUERY_TEMPLATE", "SELECT '{host}'")

    settings = load_settings(dotenv=False)

    assert settings.dsn == "postgresql://bench@db:5432/tsdb"
    assert settings.query_template == "SELECT '{host}'"


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "bench.log"

    logger = setup_logging(level="debug", log_file=str(log_file))
    logging.getLogger("pqbench.test").debug("hello from worker")
    for h in logger.handlers:
        h.flush()

    assert logger.level == logging.DEBUG
    assert "hello from worker" in log_file.read_text()
    for h in logger.handlers:
        h.close()
    logger.handlers.clear()


def test_setup_logging_keeps_stdout_for_report(capsys):
    logger = setup_logging(level="DEBUG")
    logging.getLogger("pqbench.core").warning("worker 0 failed")

    out, err = capsys.readouterr()
    assert out == ""
    assert "worker 0 failed" in err
    assert logging.getLogger("asyncpg").level == logging.INFO
    logger.handlers.clear()
