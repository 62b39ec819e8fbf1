"""Fixtures keeping CLI tests away from the real log file."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from pytest_mock import MockerFixture


@pytest.fixture(autouse=True)
def mock_setup_logger(mocker: MockerFixture) -> MagicMock:
    """Replace logger setup performed while processing arguments."""

    return mocker.patch("cargoscript.ui.cli.args.parser.setup_logger")
