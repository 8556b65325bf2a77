"""Tests for hisaab.core.utils.logging."""

import os

from loguru import logger

from hisaab.core.utils.logging import resolve_log_file, setup_logging


def test_file_sink(tmp_dir):
    log_file = os.path.join(tmp_dir, "hisaab.log")
    setup_logging(level="info", log_file=log_file)

    logger.info("ledger loaded")
    logger.debug("not written")
    logger.remove()

    with open(log_file) as f:
        content = f.read()
    assert "ledger loaded" in content
    assert "not written" not in content


def test_log_dir_sink(tmp_dir):
    log_dir = os.path.join(tmp_dir, "logs")
    path = setup_logging(level="INFO", log_dir=log_dir)
    logger.info("rules executed")
    logger.remove()

    assert str(path) == os.path.join(log_dir, "hisaab.log")
    with open(path) as f:
        assert "rules executed" in f.read()


def test_explicit_file_wins_over_dir(tmp_dir):
    log_file = os.path.join(tmp_dir, "custom.log")
    path = resolve_log_file(log_file, os.path.join(tmp_dir, "logs"))
    assert str(path) == log_file


def test_stderr_only():
    assert setup_logging(level="warning") is None
