"""Wire-level models for the kitty remote control protocol."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from kitty_rc.exceptions import CommandFailedError

# Escape code framing every record: ESC P @kitty-cmd <json> ESC \
PREFIX = b'\x1bP@kitty-cmd'
SUFFIX = b'\x1b\\'

# Payloads larger than this many bytes are written as a chunk sequence
STREAMING_THRESHOLD = 4096

DEFAULT_PROTOCOL_VERSION = (0, 43, 1)


class Command(BaseModel):
	"""A fully validated command, ready to be encoded.

	Only builders in kitty_rc.commands create these, so every Command seen by the
	rest of the package has passed parameter validation.
	"""

	model_config = ConfigDict(frozen=True, extra='forbid')

	verb: str
	parameters: dict[str, Any] = Field(default_factory=dict)
	payload: bytes | str | None = Field(default=None, description='Opaque blob sent as the trailing data field')
	async_token: str | None = None
	version: tuple[int, int, int] = DEFAULT_PROTOCOL_VERSION
	no_response: bool = False
	kitty_window_id: str | None = None


class Message(BaseModel):
	"""Encoded form of one Command.

	The record is kept as three segments so the payload can be sliced without
	touching the envelope: header (prefix and JSON up to the payload), body (the
	escaped payload text) and trailer (closing JSON and suffix).
	"""

	model_config = ConfigDict(frozen=True)

	verb: str
	header: bytes
	body: bytes = b''
	trailer: bytes = b''
	async_token: str | None = None
	expects_response: bool = True

	@property
	def raw(self) -> bytes:
		return self.header + self.body + self.trailer

	@property
	def payload_size(self) -> int:
		return len(self.body)


class Chunk(BaseModel):
	"""One piece of a streamed Message."""

	model_config = ConfigDict(frozen=True)

	index: int
	data: bytes
	final: bool


class Response(BaseModel):
	"""Reply from a kitty instance."""

	model_config = ConfigDict(extra='ignore')

	ok: bool
	data: Any = None
	error: str | None = None
	tb: str | None = None
	async_id: str | None = None

	def raise_for_error(self, target: int | None = None, verb: str | None = None) -> 'Response':
		"""Raise CommandFailedError when the peer rejected the command."""
		if not self.ok:
			raise CommandFailedError(self.error or 'Command failed', traceback=self.tb, target=target, verb=verb)
		return self
