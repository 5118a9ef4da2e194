from enum import Enum

from pydantic import BaseModel, ConfigDict


class StatusKind(str, Enum):
	NOT_CHECKED = 'not_checked'
	READY = 'ready'
	NO_SOCKET = 'no_socket'
	FAILED = 'failed'


class Status(BaseModel):
	"""What the registry last learned about a target.

	NO_SOCKET means nothing listens at the resolved path (the instance is not set
	up for remote control); FAILED carries the reason of the last transport or
	protocol failure.
	"""

	model_config = ConfigDict(frozen=True)

	kind: StatusKind
	reason: str | None = None

	@classmethod
	def not_checked(cls) -> 'Status':
		return cls(kind=StatusKind.NOT_CHECKED)

	@classmethod
	def ready(cls) -> 'Status':
		return cls(kind=StatusKind.READY)

	@classmethod
	def no_socket(cls) -> 'Status':
		return cls(kind=StatusKind.NO_SOCKET)

	@classmethod
	def failed(cls, reason: str) -> 'Status':
		return cls(kind=StatusKind.FAILED, reason=reason)

	@property
	def is_ready(self) -> bool:
		return self.kind == StatusKind.READY

	def __str__(self) -> str:
		if self.reason:
			return f'{self.kind.value}: {self.reason}'
		return self.kind.value
