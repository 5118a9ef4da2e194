"""A single Unix socket connection to one kitty instance."""

import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import TypeVar

from kitty_rc.commands.window import LsCommand
from kitty_rc.connection.views import ConnectionState
from kitty_rc.exceptions import (
	ConnectionLostError,
	ConnectionTimeoutError,
	KittyConnectionError,
	MalformedResponseError,
	SocketNotFoundError,
	SocketRefusedError,
)
from kitty_rc.protocol.codec import decode_response, encode, into_chunks
from kitty_rc.protocol.views import SUFFIX, Message, Response

logger = logging.getLogger(__name__)

T = TypeVar('T')

# ls replies for large sessions easily exceed the default 64 KiB stream limit
READ_LIMIT = 16 * 1024 * 1024


class Connection:
	"""Request/response channel to one kitty instance.

	One exchange runs at a time; concurrent callers queue on an internal lock.
	Any timeout, reset or cancellation in the middle of an exchange leaves the
	stream in an unknown position, so the connection becomes BROKEN and must be
	replaced rather than reused.
	"""

	def __init__(self, target: int, socket_path: str, timeout: float = 10.0, command_timeout: float | None = None):
		self.target = target
		self.socket_path = socket_path
		self.timeout = timeout
		self.command_timeout = command_timeout if command_timeout is not None else timeout
		self.state = ConnectionState.DISCONNECTED
		self.created_at = time.monotonic()
		self.last_used = self.created_at

		self._reader: asyncio.StreamReader | None = None
		self._writer: asyncio.StreamWriter | None = None
		self._io_lock = asyncio.Lock()
		# Out-of-band replies that arrived while waiting for something else, by async_id
		self._pending: dict[str, Response] = {}
		self._closed = False

	def __repr__(self) -> str:
		return f'Connection(target={self.target}, socket_path={self.socket_path!r}, state={self.state.value})'

	@classmethod
	async def connect(
		cls,
		target: int,
		socket_path: str,
		timeout: float = 10.0,
		command_timeout: float | None = None,
		probe: bool = True,
	) -> 'Connection':
		"""Open a connection and, unless ``probe`` is False, verify the peer answers commands."""
		connection = cls(target, socket_path, timeout=timeout, command_timeout=command_timeout)
		await connection.open()
		if probe:
			try:
				await connection.probe()
			except BaseException:
				await connection.close()
				raise
		return connection

	@property
	def is_ready(self) -> bool:
		return self.state == ConnectionState.READY

	@property
	def idle_for(self) -> float:
		return time.monotonic() - self.last_used

	@property
	def busy(self) -> bool:
		return self._io_lock.locked()

	async def open(self) -> None:
		if self._closed or self.state != ConnectionState.DISCONNECTED:
			raise KittyConnectionError(f'Cannot open a connection in state {self.state.value}', target=self.target)

		self.state = ConnectionState.CONNECTING
		logger.debug(f'Connecting to kitty {self.target} at {self.socket_path}')
		try:
			self._reader, self._writer = await asyncio.wait_for(
				asyncio.open_unix_connection(self.socket_path, limit=READ_LIMIT), timeout=self.timeout
			)
		except FileNotFoundError as e:
			self.state = ConnectionState.DISCONNECTED
			raise SocketNotFoundError(f'No socket at {self.socket_path}', target=self.target) from e
		except ConnectionRefusedError as e:
			self.state = ConnectionState.DISCONNECTED
			raise SocketRefusedError(f'Connection refused by {self.socket_path}', target=self.target) from e
		except TimeoutError as e:
			self.state = ConnectionState.DISCONNECTED
			raise ConnectionTimeoutError(
				f'Timed out after {self.timeout}s connecting to {self.socket_path}', timeout=self.timeout, target=self.target
			) from e
		except OSError as e:
			self.state = ConnectionState.DISCONNECTED
			raise SocketRefusedError(f'Cannot connect to {self.socket_path}: {e}', target=self.target) from e
		except asyncio.CancelledError:
			self.state = ConnectionState.DISCONNECTED
			raise

		self.state = ConnectionState.READY
		self.last_used = time.monotonic()
		logger.info(f'Connected to kitty {self.target} at {self.socket_path}')

	async def probe(self) -> Response:
		"""Round-trip a harmless ls to prove the peer accepts remote control commands.

		Raises:
			SocketRefusedError: The socket answered but rejected the command, e.g.
				remote control is disabled or a password is required.
		"""
		message = encode(LsCommand().self_window().build())
		response = await self.execute(message)
		assert response is not None
		if not response.ok:
			raise SocketRefusedError(
				f'Socket is present but the remote control protocol was rejected: {response.error or "unknown error"}',
				target=self.target,
				verb='ls',
			)
		return response

	async def send(self, message: Message) -> None:
		"""Write a message without waiting for any reply."""
		async with self._io_lock:
			await self._write(message)
			self.last_used = time.monotonic()

	async def execute(self, message: Message) -> Response | None:
		"""Write a message and wait for its reply.

		Returns:
			The reply, or None for messages sent with no_response. Replies carrying
			another command's async_id are kept for wait_async().
		"""
		async with self._io_lock:
			await self._write(message)
			if not message.expects_response:
				self.last_used = time.monotonic()
				return None
			response = await self._read_until(message.async_token, message.verb)
			self.last_used = time.monotonic()
			return response

	async def wait_async(self, token: str, timeout: float | None = None) -> Response:
		"""Wait for the out-of-band reply of a command sent with an async token."""
		if token in self._pending:
			return self._pending.pop(token)
		async with self._io_lock:
			if token in self._pending:
				return self._pending.pop(token)
			response = await self._read_until(token, None, timeout=timeout)
			self.last_used = time.monotonic()
			return response

	async def close(self) -> None:
		"""Close the socket. Safe to call more than once and on a broken connection."""
		if self._closed:
			return
		self._closed = True
		previous = self.state
		self.state = ConnectionState.DISCONNECTED
		writer, self._writer, self._reader = self._writer, None, None
		self._pending.clear()
		if writer is None:
			return
		writer.close()
		try:
			await writer.wait_closed()
		except (ConnectionError, OSError) as e:
			logger.debug(f'Error while closing connection to kitty {self.target}: {type(e).__name__}: {e}')
		logger.info(f'Closed connection to kitty {self.target} (was {previous.value})')

	def _ensure_ready(self, verb: str | None) -> None:
		if self.state != ConnectionState.READY or self._writer is None or self._reader is None:
			raise ConnectionLostError(f'Connection is {self.state.value}, not ready', target=self.target, verb=verb)

	def _mark_broken(self) -> None:
		if self.state == ConnectionState.READY:
			logger.warning(f'Connection to kitty {self.target} is broken')
			self.state = ConnectionState.BROKEN
		if self._writer is not None:
			self._writer.close()

	async def _io(self, awaitable: Awaitable[T], what: str, verb: str | None, timeout: float) -> T:
		try:
			return await asyncio.wait_for(awaitable, timeout=timeout)
		except TimeoutError as e:
			self._mark_broken()
			raise ConnectionTimeoutError(f'Timed out after {timeout}s {what}', timeout=timeout, target=self.target, verb=verb) from e
		except asyncio.IncompleteReadError as e:
			self._mark_broken()
			raise ConnectionLostError(f'Peer closed the socket while {what}', target=self.target, verb=verb) from e
		except asyncio.LimitOverrunError as e:
			self._mark_broken()
			raise MalformedResponseError(f'Reply exceeds {READ_LIMIT} bytes', target=self.target, verb=verb) from e
		except (ConnectionResetError, BrokenPipeError, ConnectionAbortedError) as e:
			self._mark_broken()
			raise ConnectionLostError(f'Connection reset while {what}: {e}', target=self.target, verb=verb) from e
		except asyncio.CancelledError:
			self._mark_broken()
			raise

	async def _write(self, message: Message) -> None:
		self._ensure_ready(message.verb)
		assert self._writer is not None
		chunks = into_chunks(message)
		for chunk in chunks:
			self._writer.write(chunk.data)
			await self._io(self._writer.drain(), f'writing chunk {chunk.index}', message.verb, self.command_timeout)
		logger.debug(f'Sent {message.verb} to kitty {self.target} ({len(message.raw)} bytes, {len(chunks)} chunks)')

	async def _read_until(self, token: str | None, verb: str | None, timeout: float | None = None) -> Response:
		"""Read replies until one belongs to the current exchange.

		With a token, that is the reply tagged with it; without one, the first
		reply that is not tagged for somebody else.
		"""
		timeout = timeout if timeout is not None else self.command_timeout
		deadline = time.monotonic() + timeout
		while True:
			self._ensure_ready(verb)
			assert self._reader is not None
			remaining = max(deadline - time.monotonic(), 0.0)
			raw = await self._io(self._reader.readuntil(SUFFIX), 'waiting for a reply', verb, remaining)
			try:
				response = decode_response(raw)
			except MalformedResponseError as e:
				e.target, e.verb = self.target, verb
				raise
			if response.async_id is None or response.async_id == token:
				logger.debug(f'Reply from kitty {self.target} for {verb}: ok={response.ok}')
				return response
			logger.debug(f'Stashing out-of-band reply {response.async_id} from kitty {self.target}')
			self._pending[response.async_id] = response
