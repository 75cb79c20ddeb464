"""Global test fixtures and configuration."""

from __future__ import annotations

import os
from collections.abc import Generator

import pytest

from todotree.utils.cli_utils import SpinnerState
from todotree.utils.config_loader import ConfigLoader


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
	"""Keep the user's environment and the config singleton out of every test."""
	for env_var in list(os.environ):
		if env_var.startswith("TODOTREE_"):
			monkeypatch.delenv(env_var)

	ConfigLoader._instance = None  # noqa: SLF001
	SpinnerState.is_active = False
	yield
	ConfigLoader._instance = None  # noqa: SLF001
