"""Configuration for the connection registry.

Values come from keyword arguments or, through RegistryConfig.from_env(), from
KITTY_RC_* environment variables (a .env file in the working directory is
loaded first).
"""

import os
from typing import Any, Literal, Self

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from kitty_rc.exceptions import KittyError

load_dotenv()

HealthCheckMode = Literal['lazy', 'periodic']

ENV_PREFIX = 'KITTY_RC_'

_ENV_FIELDS = (
	'connect_timeout',
	'command_timeout',
	'max_retries',
	'base_delay',
	'max_delay',
	'max_pool_size',
	'idle_timeout',
	'health_check_interval',
	'health_check_mode',
)


class ConfigError(KittyError):
	"""A configuration value could not be parsed or is out of range."""


class RegistryConfig(BaseModel):
	"""Timeouts, retry policy and pool limits for a ConnectionRegistry."""

	model_config = ConfigDict(frozen=True, extra='forbid')

	connect_timeout: float = Field(default=10.0, gt=0, description='Seconds allowed to open a socket and run the liveness probe')
	command_timeout: float | None = Field(default=None, gt=0, description='Seconds allowed per exchange; defaults to connect_timeout')
	max_retries: int = Field(default=3, ge=0, description='Retries after the first attempt')
	base_delay: float = Field(default=0.1, gt=0, description='Delay before the first retry; doubles with every further retry')
	max_delay: float | None = Field(default=None, gt=0, description='Upper bound for a single delay; never reached before the last retry')
	max_pool_size: int = Field(default=10, ge=1)
	idle_timeout: float = Field(default=300.0, gt=0)
	health_check_interval: float = Field(default=30.0, gt=0)
	health_check_mode: HealthCheckMode = 'lazy'
	probe_on_connect: bool = True

	@model_validator(mode='after')
	def _check_delays(self) -> Self:
		if self.max_delay is not None and self.max_retries > 0:
			longest = self.base_delay * 2 ** (self.max_retries - 1)
			if self.max_delay < longest:
				raise ValueError(
					f'max_delay ({self.max_delay}) is below the last backoff delay ({longest}) of {self.max_retries} retries'
				)
		return self

	@property
	def effective_command_timeout(self) -> float:
		return self.command_timeout if self.command_timeout is not None else self.connect_timeout

	def backoff_delay(self, attempt: int) -> float:
		"""Delay before retry number ``attempt`` (0-based): base_delay doubled per attempt."""
		delay = self.base_delay * 2**attempt
		return delay if self.max_delay is None else min(delay, self.max_delay)

	@classmethod
	def from_env(cls, **overrides: Any) -> 'RegistryConfig':
		"""Build a config from KITTY_RC_* variables; explicit overrides win."""
		values: dict[str, Any] = {}
		for field in _ENV_FIELDS:
			raw = os.getenv(f'{ENV_PREFIX}{field.upper()}')
			if raw is not None and raw.strip():
				values[field] = raw.strip()
		values.update(overrides)
		try:
			return cls.model_validate(values)
		except ValidationError as e:
			raise ConfigError(f'Invalid kitty-rc configuration: {e}') from e


def get_logging_level() -> str:
	return os.getenv(f'{ENV_PREFIX}LOGGING_LEVEL', 'warning').lower()


def get_socket_dir() -> str | None:
	return os.getenv(f'{ENV_PREFIX}SOCKET_DIR') or None
