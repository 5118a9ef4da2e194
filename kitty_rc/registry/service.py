"""Pool of connections to kitty instances, with retries and health tracking."""

import asyncio
import logging
from collections.abc import Callable

from kitty_rc.config import RegistryConfig
from kitty_rc.connection.service import Connection
from kitty_rc.exceptions import (
	DeadlineExceededError,
	KittyConnectionError,
	KittyError,
	MaxRetriesExceededError,
	PoolExhaustedError,
	RegistryClosedError,
	SocketNotFoundError,
)
from kitty_rc.protocol.codec import encode
from kitty_rc.protocol.views import Command, Message, Response
from kitty_rc.registry.views import Status
from kitty_rc.utils import create_task_with_error_handling, default_socket_path

logger = logging.getLogger(__name__)

SocketResolver = Callable[[int], str]


def _tag(error: KittyError, target: int, verb: str | None) -> KittyError:
	if error.target is None:
		error.target = target
	if error.verb is None:
		error.verb = verb
	return error


class ConnectionRegistry:
	"""Keeps at most one live connection per kitty instance.

	Targets are kitty process ids; ``socket_resolver`` maps one to a socket path
	(default_socket_path unless given). Every operation on a target (acquiring,
	executing, probing, evicting) holds that target's lock, so a background
	cleanup never closes a socket under an in-flight command and concurrent
	callers for one target share a single socket.

	Use it as an async context manager to run the background maintenance task:

		async with ConnectionRegistry(RegistryConfig.from_env()) as registry:
			response = await registry.execute_with_retry(pid, LsCommand().build())
	"""

	def __init__(self, config: RegistryConfig | None = None, socket_resolver: SocketResolver | None = None):
		self.config = config or RegistryConfig()
		self._resolve = socket_resolver or default_socket_path
		self._connections: dict[int, Connection] = {}
		self._status: dict[int, Status] = {}
		self._locks: dict[int, asyncio.Lock] = {}
		# Targets whose connection is being opened; each holds a pool slot
		self._opening: set[int] = set()
		self._maintenance_task: asyncio.Task[None] | None = None
		self._closed = False

	async def __aenter__(self) -> 'ConnectionRegistry':
		self.start()
		return self

	async def __aexit__(self, *exc_info: object) -> None:
		await self.shutdown()

	@property
	def closed(self) -> bool:
		return self._closed

	def targets(self) -> list[int]:
		"""Targets that currently have a pooled connection."""
		return list(self._connections)

	def status(self, target: int) -> Status:
		"""Last known status of a target, without any I/O."""
		return self._status.get(target, Status.not_checked())

	async def check_status(self, target: int) -> Status:
		"""Status of a target, connecting first if it was never checked."""
		self._ensure_open()
		if target not in self._status:
			async with self._lock_for(target):
				self._ensure_open()
				if target not in self._status:
					try:
						await self._acquire(target)
					except KittyError as e:
						logger.warning(f'kitty {target} is not reachable: {e}')
		return self.status(target)

	async def get_connection(self, target: int) -> Connection:
		"""Pooled connection for a target, establishing it on demand."""
		self._ensure_open()
		async with self._lock_for(target):
			self._ensure_open()
			return await self._acquire(target)

	async def execute_with_retry(self, target: int, command: Command, timeout: float | None = None) -> Response | None:
		"""Send a command, reconnecting and retrying on transport failures.

		Args:
			target: kitty process id.
			command: Built command.
			timeout: Overall deadline in seconds for all attempts and backoff sleeps.

		Returns:
			The reply (also when the terminal replied ok=false; call
			raise_for_error() to turn that into an exception), or None for
			commands sent with no_response.

		Raises:
			SocketNotFoundError: Nothing listens for the target (status NO_SOCKET).
			KittyConnectionError: The first connection attempt failed.
			MaxRetriesExceededError: Every attempt failed with a transport error.
			DeadlineExceededError: ``timeout`` ran out.
			ProtocolError: The reply could not be decoded. Never retried.
		"""
		self._ensure_open(command.verb)
		message = encode(command)
		if timeout is None:
			return await self._execute_with_retry(target, message)
		try:
			return await asyncio.wait_for(self._execute_with_retry(target, message), timeout=timeout)
		except TimeoutError as e:
			raise DeadlineExceededError(
				f'Deadline of {timeout}s exceeded', timeout=timeout, target=target, verb=command.verb
			) from e

	async def cleanup_idle(self) -> list[int]:
		"""Close connections idle for longer than idle_timeout; returns the evicted targets."""
		evicted = []
		for target, connection in list(self._connections.items()):
			if connection.idle_for <= self.config.idle_timeout:
				continue
			lock = self._lock_for(target)
			if lock.locked():
				continue
			async with lock:
				# Recheck: it may have been used or replaced while we waited
				if self._connections.get(target) is not connection or connection.idle_for <= self.config.idle_timeout:
					continue
				del self._connections[target]
				self._status.pop(target, None)
				await connection.close()
			logger.info(f'Evicted idle connection to kitty {target} (idle {connection.idle_for:.0f}s)')
			evicted.append(target)
		return evicted

	async def health_check(self) -> dict[int, Status]:
		"""Probe every pooled connection, dropping the ones that fail."""
		results: dict[int, Status] = {}
		for target in list(self._connections):
			async with self._lock_for(target):
				connection = self._connections.get(target)
				if connection is None:
					continue
				try:
					await connection.probe()
				except KittyError as e:
					logger.warning(f'Health check of kitty {target} failed: {e}')
					await self._discard(target, Status.failed(e.message))
				else:
					self._status[target] = Status.ready()
				results[target] = self.status(target)
		return results

	def start(self) -> None:
		"""Start background maintenance. Needs a running event loop."""
		self._ensure_open()
		if self._maintenance_task is not None and not self._maintenance_task.done():
			return
		self._maintenance_task = create_task_with_error_handling(
			self._maintenance_loop(), name='kitty_rc_registry_maintenance', logger_instance=logger
		)

	async def shutdown(self) -> None:
		"""Stop accepting work, wait for in-flight commands and close every connection once."""
		if self._closed:
			return
		self._closed = True
		logger.info(f'Shutting down connection registry ({len(self._connections)} connections)')

		task, self._maintenance_task = self._maintenance_task, None
		if task is not None:
			task.cancel()
			await asyncio.gather(task, return_exceptions=True)

		for target, lock in list(self._locks.items()):
			async with lock:
				connection = self._connections.pop(target, None)
				if connection is not None:
					await connection.close()

		for connection in list(self._connections.values()):
			await connection.close()
		self._connections.clear()
		self._status.clear()
		self._locks.clear()

	# Internals. Methods below expect the target lock to be held by the caller.

	def _ensure_open(self, verb: str | None = None) -> None:
		if self._closed:
			raise RegistryClosedError('Connection registry is shut down', verb=verb)

	def _lock_for(self, target: int) -> asyncio.Lock:
		lock = self._locks.get(target)
		if lock is None:
			lock = self._locks[target] = asyncio.Lock()
		return lock

	async def _execute_with_retry(self, target: int, message: Message) -> Response | None:
		verb = message.verb
		last_error: KittyError | None = None
		attempt = 0
		was_ready = False
		while True:
			async with self._lock_for(target):
				self._ensure_open(verb)
				if attempt == 0:
					was_ready = self.status(target).is_ready
				try:
					connection = await self._acquire(target)
				except KittyConnectionError as e:
					_tag(e, target, verb)
					# A target that never had a working connection reports the failure as is
					if (attempt == 0 and not was_ready) or not e.retryable:
						raise
					last_error = e
				else:
					try:
						response = await connection.execute(message)
					except KittyError as e:
						_tag(e, target, verb)
						if not e.retryable:
							raise
						await self._discard(target, Status.failed(e.message))
						last_error = e
					else:
						self._status[target] = Status.ready()
						return response

			if attempt >= self.config.max_retries:
				raise MaxRetriesExceededError(attempt + 1, last_error=last_error, target=target, verb=verb)
			delay = self.config.backoff_delay(attempt)
			logger.warning(
				f'{verb} to kitty {target} failed: {last_error}, retrying in {delay:.2f}s '
				f'(attempt {attempt + 1}/{self.config.max_retries + 1})'
			)
			await asyncio.sleep(delay)
			attempt += 1

	async def _acquire(self, target: int) -> Connection:
		connection = self._connections.get(target)
		if connection is not None:
			if not connection.is_ready:
				await self._discard(target, Status.failed(f'connection was {connection.state.value}'))
			elif self.config.health_check_mode == 'lazy' and connection.idle_for > self.config.health_check_interval:
				try:
					await connection.probe()
				except KittyError as e:
					logger.warning(f'Stale connection to kitty {target} failed its probe: {e}')
					await self._discard(target, Status.failed(e.message))
				else:
					self._status[target] = Status.ready()
					return connection
			else:
				return connection
		return await self._establish(target)

	async def _establish(self, target: int) -> Connection:
		await self._make_room(target)
		self._opening.add(target)
		socket_path = self._resolve(target)
		try:
			connection = await Connection.connect(
				target,
				socket_path,
				timeout=self.config.connect_timeout,
				command_timeout=self.config.effective_command_timeout,
				probe=self.config.probe_on_connect,
			)
		except SocketNotFoundError:
			self._status[target] = Status.no_socket()
			raise
		except KittyError as e:
			self._status[target] = Status.failed(e.message)
			raise
		finally:
			self._opening.discard(target)
		self._connections[target] = connection
		self._status[target] = Status.ready()
		return connection

	async def _make_room(self, target: int) -> None:
		while len(self._connections) + len(self._opening) >= self.config.max_pool_size:
			candidates = [
				(connection.last_used, other)
				for other, connection in self._connections.items()
				if other != target and not self._lock_for(other).locked() and not connection.busy
			]
			if not candidates:
				raise PoolExhaustedError(
					f'All {self.config.max_pool_size} pooled connections are busy or opening', target=target
				)
			_, victim = min(candidates)
			connection = self._connections.pop(victim)
			self._status.pop(victim, None)
			logger.info(f'Pool full, evicting least recently used connection to kitty {victim}')
			await connection.close()

	async def _discard(self, target: int, status: Status) -> None:
		connection = self._connections.pop(target, None)
		self._status[target] = status
		if connection is not None:
			await connection.close()

	async def _maintenance_loop(self) -> None:
		interval = min(self.config.health_check_interval, self.config.idle_timeout)
		while not self._closed:
			await asyncio.sleep(interval)
			try:
				evicted = await self.cleanup_idle()
				if evicted:
					logger.debug(f'Maintenance evicted {len(evicted)} idle connections')
				if self.config.health_check_mode == 'periodic':
					await self.health_check()
			except KittyError as e:
				logger.warning(f'Registry maintenance failed: {e}')
