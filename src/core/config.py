"""
Application configuration for Log Pulse.

Provides environment-aware settings for the live-tail monitor. Only the log
source and the debug switch are tunable; the window policy and queue capacity
are fixed constants living next to the code that uses them.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class SourceKind(str, Enum):
	"""Where raw log lines come from."""

	STDIN = "stdin"
	FILE = "file"


class Config(BaseSettings):
	"""
	Global configuration with environment overrides.

	Notes:
	- log_files: one reader thread is started per path when source is "file";
	  check_source() rejects a file source without paths once overrides are merged.
	- poll_interval: seconds between polls of a followed file once it is drained.
	- debug_mode: include the ingestion queue depth in every snapshot.
	"""

	model_config = SettingsConfigDict(env_prefix="PULSE_", env_file=".env", extra="ignore")

	log_level: str = Field("INFO", description="Default logging level")
	logs_dir: Path = Field(Path("logs"), description="Directory for log files")

	source: SourceKind = Field(SourceKind.STDIN, description="Log source kind")
	log_files: List[Path] = Field(default_factory=list, description="Files to follow")
	poll_interval: float = Field(0.25, gt=0.0, description="File-follow poll interval")
	debug_mode: bool = Field(False, description="Expose queue depth diagnostics")

	def check_source(self) -> "Config":
		"""Raise ConfigurationError unless the source settings are usable."""
		if self.source == SourceKind.FILE and not self.log_files:
			raise ConfigurationError("source 'file' requires at least one log file")
		return self

	def model_post_init(self, __context: object) -> None:
		self.logs_dir.mkdir(parents=True, exist_ok=True)


config = Config()
