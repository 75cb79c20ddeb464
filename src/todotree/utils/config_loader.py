"""
Configuration loader for todotree.

This module provides functionality for loading and managing
configuration settings.

"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, TypeVar, cast

import yaml
from xdg.BaseDirectory import xdg_config_home

from todotree.config import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Minimum number of parts in an override variable: TODOTREE_<SECTION>_<KEY>
MIN_ENV_VAR_PARTS = 2

ENV_PREFIX = "TODOTREE_"

ConfigValue = str | int | float | bool | dict[str, Any] | list[Any] | None


class ConfigError(Exception):
	"""Exception raised for configuration errors."""


class ConfigLoader:
	"""
	Loads and manages configuration for todotree.

	Configuration is layered: built-in defaults, then a YAML file, then
	environment variable overrides.

	"""

	_instance = None

	@classmethod
	def get_instance(
		cls, config_file: str | None = None, reload: bool = False, repo_root: Path | None = None
	) -> "ConfigLoader":
		"""
		Get the singleton instance of ConfigLoader.

		Args:
		        config_file: Path to configuration file (optional)
		        reload: Whether to reload config even if already loaded
		        repo_root: Repository root path (optional)

		Returns:
		        ConfigLoader: Singleton instance

		"""
		if cls._instance is None or reload:
			cls._instance = cls(config_file, repo_root=repo_root)
		return cls._instance

	def __init__(self, config_file: str | None = None, repo_root: Path | None = None) -> None:
		"""
		Initialize the configuration loader.

		Args:
		        config_file: Path to configuration file (optional)
		        repo_root: Repository root path, searched for .todotree.yml (optional)

		"""
		self.config: dict[str, Any] = {}
		self.repo_root = repo_root
		self.config_file = self._resolve_config_file(config_file)
		self.load_config()

	def _resolve_config_file(self, config_file: str | None = None) -> Path | None:
		"""
		Resolve the configuration file path.

		If a config file is specified, use that. Otherwise, look in standard locations:
		1. .todotree.yml in the repository root, then in the current directory
		2. $XDG_CONFIG_HOME/todotree/config.yml
		3. ~/.todotree/config.yml

		Args:
		        config_file: Explicitly provided config file path (optional)

		Returns:
		        Optional[Path]: Resolved config file path or None if no suitable file found

		"""
		if config_file:
			path = Path(config_file).expanduser().resolve()
			if not path.exists():
				logger.warning("Specified config file not found: %s", path)
			return path

		candidates = []
		if self.repo_root is not None:
			candidates.append(self.repo_root / ".todotree.yml")
		candidates.append(Path(".todotree.yml"))
		candidates.append(Path(xdg_config_home) / "todotree" / "config.yml")
		candidates.append(Path.home() / ".todotree" / "config.yml")

		for candidate in candidates:
			if candidate.exists():
				return candidate

		return None

	def load_config(self) -> dict[str, Any]:
		"""
		Load configuration from file and apply environment variable overrides.

		Returns:
		        Dict[str, Any]: Loaded configuration

		Raises:
		        ConfigError: If configuration file exists but cannot be loaded

		"""
		self.config = copy.deepcopy(DEFAULT_CONFIG)

		if self.config_file:
			try:
				if self.config_file.exists():
					with self.config_file.open(encoding="utf-8") as f:
						file_config = yaml.safe_load(f)
					if file_config:
						if not isinstance(file_config, dict):
							msg = f"Configuration in {self.config_file} must be a mapping"
							raise ConfigError(msg)
						self._merge_configs(self.config, file_config)
					logger.info("Loaded configuration from %s", self.config_file)
				else:
					logger.warning("Configuration file not found: %s", self.config_file)
			except (OSError, yaml.YAMLError) as e:
				error_msg = f"Error loading configuration from {self.config_file}: {e}"
				logger.debug(error_msg, exc_info=True)
				raise ConfigError(error_msg) from e

		self._apply_env_overrides()
		self._validate()

		return self.config

	def _merge_configs(self, base: dict[str, Any], override: dict[str, Any]) -> None:
		"""
		Recursively merge two configuration dictionaries.

		Args:
		        base: Base configuration dictionary to merge into
		        override: Override configuration to apply

		"""
		for key, value in override.items():
			if isinstance(value, dict) and key in base and isinstance(base[key], dict):
				self._merge_configs(base[key], value)
			else:
				base[key] = value

	def _apply_env_overrides(self) -> None:
		"""Apply TODOTREE_SECTION_KEY environment variable overrides."""
		for env_var, value in os.environ.items():
			if not env_var.startswith(ENV_PREFIX):
				continue
			parts = env_var.lower().split("_")[1:]
			if len(parts) < MIN_ENV_VAR_PARTS:
				continue
			section, key = parts[0], "_".join(parts[1:])

			if value.lower() in ("true", "yes"):
				typed_value: ConfigValue = True
			elif value.lower() in ("false", "no"):
				typed_value = False
			else:
				try:
					typed_value = int(value)
				except ValueError:
					try:
						typed_value = float(value)
					except ValueError:
						typed_value = value

			if not isinstance(self.config.get(section), dict):
				self.config[section] = {}

			self.config[section][key] = typed_value
			logger.debug("Applied environment override %s: %s", env_var, typed_value)

	def _validate(self) -> None:
		"""Check the values the scanner depends on."""
		mode = self.get("scan.mode")
		if mode not in ("tree", "diff"):
			msg = f"scan.mode must be 'tree' or 'diff', got {mode!r}"
			raise ConfigError(msg)

		for key in ("scan.binary_check_bytes", "report.short_id_length"):
			value = self.get(key)
			if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
				msg = f"{key} must be a positive integer, got {value!r}"
				raise ConfigError(msg)

		if not isinstance(self.get("scan.exclude_patterns"), list):
			msg = "scan.exclude_patterns must be a list of patterns"
			raise ConfigError(msg)

	def get(self, key: str, default: T = None) -> T:
		"""
		Get a configuration value using dot notation.

		Examples:
		        config.get("scan")
		        config.get("scan.base_branch")

		Args:
		        key: Configuration key, can include dots for nested access
		        default: Default value if key not found

		Returns:
		        T: Configuration value or default

		"""
		current: Any = self.config
		for part in key.split("."):
			if isinstance(current, dict) and part in current:
				current = current[part]
			else:
				return default

		return cast("T", current)

	def set(self, key: str, value: ConfigValue) -> None:
		"""
		Set a configuration value using dot notation.

		Args:
		        key: Configuration key, can include dots for nested access
		        value: Value to set

		"""
		parts = key.split(".")
		current = self.config

		for part in parts[:-1]:
			if not isinstance(current.get(part), dict):
				current[part] = {}
			current = current[part]

		current[parts[-1]] = value
