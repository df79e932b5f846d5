import logging
from pathlib import Path

import pytest

from airlift.logging.log import init_logging


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger = logging.getLogger("airlift")
    for h in list(logger.handlers):
        h.close()
    logger.handlers.clear()
    logger.propagate = True


def test_log_file_named_after_distribution(tmp_path: Path):
    logger, run_id, log_path = init_logging(distribution="k3s", version="v1", base_dir=tmp_path)

    logger.debug("fetching binary")
    for h in logger.handlers:
        h.flush()

    assert log_path.parent == tmp_path
    assert log_path.name.startswith("k3s-")
    assert run_id in log_path.name
    text = log_path.read_text()
    assert "k3s v1 run" in text
    assert "fetching binary" in text


def test_log_dir_from_environment(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("AIRLIFT_LOG_DIR", str(tmp_path / "runs"))
    _, _, log_path = init_logging(distribution="k3s")
    assert log_path.parent == tmp_path / "runs"


def test_console_level_follows_verbose(tmp_path: Path):
    logger, _, _ = init_logging(distribution="k3s", base_dir=tmp_path, verbose=False)
    console = [h for h in logger.handlers if not isinstance(h, logging.FileHandler)]
    assert console[0].level == logging.INFO
    assert logging.getLogger("urllib3").level == logging.WARNING
