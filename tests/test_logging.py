#!/usr/bin/env python3
"""
Tests for logging configuration.
"""

import logging

import pytest

from mcgraph.logging import GREY, close_logging, configure_logging


@pytest.fixture(autouse=True)
def cleanup():
    yield
    close_logging()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_writes_to_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "mcgraph.log"
        assert configure_logging("INFO", log_file=log_file) == log_file

        logging.getLogger("mcgraph.tests").info("hello log")
        logging.getLogger("other").info("not ours")
        close_logging()

        text = log_file.read_text()
        assert "[INFO] mcgraph.tests: hello log" in text
        assert "not ours" not in text

    def test_level_filters(self, tmp_path):
        log_file = tmp_path / "mcgraph.log"
        configure_logging("WARNING", log_file=log_file)
        logging.getLogger("mcgraph.tests").info("quiet")
        logging.getLogger("mcgraph.tests").warning("loud")
        close_logging()

        text = log_file.read_text()
        assert "quiet" not in text
        assert "loud" in text

    def test_stderr_is_grey(self, tmp_path, capsys):
        configure_logging("INFO", log_file=tmp_path / "mcgraph.log", stderr=True)
        logging.getLogger("mcgraph.tests").warning("careful")
        logging.getLogger("mcgraph.tests").info("file only")

        err = capsys.readouterr().err
        assert err.startswith(GREY)
        assert "[warning] careful" in err
        assert "file only" not in err

    def test_reconfigure_replaces_handlers(self, tmp_path):
        configure_logging(log_file=tmp_path / "a.log")
        configure_logging(log_file=tmp_path / "b.log")
        logging.getLogger("mcgraph.tests").warning("only in b")
        close_logging()

        assert "only in b" not in (tmp_path / "a.log").read_text()
        assert "only in b" in (tmp_path / "b.log").read_text()

    def test_unknown_level(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging("LOUD", log_file=tmp_path / "x.log")


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
