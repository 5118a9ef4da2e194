"""Exception hierarchy for kitty remote control.

Every error carries a human readable message plus the context a caller needs to
log something actionable: the target instance (a kitty process id) and the verb
that was being sent, when known.
"""


class KittyError(Exception):
	"""Base class for all kitty remote control errors."""

	retryable: bool = False

	def __init__(self, message: str, target: int | None = None, verb: str | None = None):
		super().__init__(message)
		self.message = message
		self.target = target
		self.verb = verb

	def __str__(self) -> str:
		context = []
		if self.target is not None:
			context.append(f'target={self.target}')
		if self.verb:
			context.append(f'verb={self.verb}')
		if not context:
			return self.message
		return f'{self.message} ({", ".join(context)})'


# Builder-time errors. These never reach the wire.
class CommandError(KittyError):
	"""Raised when a command cannot be built."""


class MissingParameterError(CommandError):
	"""A mandatory parameter of a command was not set."""

	def __init__(self, field: str, verb: str):
		super().__init__(f"Missing required parameter '{field}' for command '{verb}'", verb=verb)
		self.field = field


class InvalidValueError(CommandError):
	"""A parameter was set to a value the command does not accept."""

	def __init__(self, field: str, verb: str, reason: str):
		super().__init__(f"Invalid value for '{field}' in command '{verb}': {reason}", verb=verb)
		self.field = field
		self.reason = reason


# Transport errors
class KittyConnectionError(KittyError):
	"""Transport-level failure talking to a kitty instance."""

	retryable = True


class SocketNotFoundError(KittyConnectionError):
	"""No socket exists at the resolved path for the target."""


class SocketRefusedError(KittyConnectionError):
	"""A socket exists but the peer refused the connection or rejected the liveness probe."""


class ConnectionTimeoutError(KittyConnectionError):
	"""Connecting, writing or waiting for a reply took longer than allowed."""

	def __init__(self, message: str, timeout: float | None = None, target: int | None = None, verb: str | None = None):
		super().__init__(message, target=target, verb=verb)
		self.timeout = timeout


class DeadlineExceededError(ConnectionTimeoutError):
	"""The caller supplied deadline for a whole retry loop ran out."""

	retryable = False


class ConnectionLostError(KittyConnectionError):
	"""The peer closed or reset the socket in the middle of an exchange."""


class PoolExhaustedError(KittyConnectionError):
	"""The pool is full and every pooled connection is busy."""


class MaxRetriesExceededError(KittyConnectionError):
	"""Every attempt allowed by the retry policy failed."""

	retryable = False

	def __init__(self, attempts: int, last_error: KittyError | None = None, target: int | None = None, verb: str | None = None):
		message = f'Giving up after {attempts} attempts'
		if last_error is not None:
			message += f': {last_error.message}'
		super().__init__(message, target=target, verb=verb)
		self.attempts = attempts
		self.last_error = last_error


# Decode-time errors. Retrying cannot fix these.
class ProtocolError(KittyError):
	"""The bytes received do not follow the remote control protocol."""


class MalformedResponseError(ProtocolError):
	"""A reply could not be parsed or does not match the expected shape."""


class ChunkOutOfOrderError(ProtocolError):
	"""A chunk sequence has a gap, a reordering, or a misplaced final chunk."""


class CommandFailedError(KittyError):
	"""The peer processed the command and replied with ok=false."""

	def __init__(self, message: str, traceback: str | None = None, target: int | None = None, verb: str | None = None):
		super().__init__(message, target=target, verb=verb)
		self.traceback = traceback


class RegistryClosedError(KittyError):
	"""The connection registry has been shut down."""
