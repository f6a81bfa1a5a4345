import logging
import re

import pytest

from myst.logsetup import setup_logger


@pytest.fixture
def installed(tmp_path):
    path = tmp_path / "myst.log"
    root = logging.getLogger()
    previous = root.level
    handler = setup_logger(str(path))
    yield path, handler
    root.removeHandler(handler)
    handler.close()
    root.setLevel(previous)


def test_info_line_format(installed):
    path, handler = installed
    logging.getLogger("myst.sample").info("hello %s", "world")
    handler.flush()
    lines = path.read_text().splitlines()
    assert len(lines) == 1
    pattern = r"^\[\d{4}-\d{2}-\d{2}\]\[\d{2}:\d{2}:\d{2}:\d{6}\]\[myst\.sample\]\[INFO\] hello world$"
    assert re.match(pattern, lines[0])


def test_debug_is_filtered(installed):
    path, handler = installed
    logger = logging.getLogger("myst.sample")
    logger.debug("hidden")
    logger.warning("shown")
    handler.flush()
    text = path.read_text()
    assert "hidden" not in text
    assert "[WARNING] shown" in text


def test_unopenable_file_raises(tmp_path):
    with pytest.raises(OSError):
        setup_logger(str(tmp_path / "missing" / "dir" / "myst.log"))