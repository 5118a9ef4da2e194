"""Socket path helpers and asyncio task utilities."""

import asyncio
import logging
import os
import re
import tempfile
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

from kitty_rc.config import get_socket_dir

logger = logging.getLogger(__name__)

T = TypeVar('T')

_SOCKET_NAME_RE = re.compile(r'^kitty-(\d+)\.sock$')


def socket_dir() -> Path:
	"""Directory holding per-instance sockets: KITTY_RC_SOCKET_DIR, XDG_RUNTIME_DIR or the temp dir."""
	configured = get_socket_dir() or os.environ.get('XDG_RUNTIME_DIR')
	return Path(configured) if configured else Path(tempfile.gettempdir())


def default_socket_path(pid: int) -> str:
	"""Socket path for the kitty instance with process id ``pid``.

	Matches ``listen_on unix:/<dir>/kitty-{kitty_pid}`` style configurations.
	"""
	if pid <= 0:
		raise ValueError(f'Invalid kitty pid: {pid}')
	return str(socket_dir() / f'kitty-{pid}.sock')


def pid_from_socket_path(path: str | Path) -> int | None:
	"""Recover the process id from a ``kitty-<pid>.sock`` path, or None if it has another name."""
	match = _SOCKET_NAME_RE.match(Path(path).name)
	return int(match.group(1)) if match else None


def create_task_with_error_handling(
	coro: Coroutine[Any, Any, T],
	*,
	name: str | None = None,
	logger_instance: logging.Logger | None = None,
	suppress_exceptions: bool = False,
) -> asyncio.Task[T]:
	"""Schedule ``coro`` and log its exception when it fails instead of losing it.

	Args:
		coro: Coroutine to run.
		name: Task name, also used in the log message.
		logger_instance: Logger to report to. Defaults to this module's logger.
		suppress_exceptions: Log at warning level instead of error, for tasks whose failure is expected.

	Returns:
		The created task. Cancellation is never logged.
	"""
	task = asyncio.create_task(coro, name=name)
	log = logger_instance or logger

	def _on_done(done: asyncio.Task[T]) -> None:
		if done.cancelled():
			return
		exc = done.exception()
		if exc is None:
			return
		task_name = name or done.get_name()
		if suppress_exceptions:
			log.warning(f'Background task {task_name} failed: {type(exc).__name__}: {exc}')
		else:
			log.error(f'Background task {task_name} failed: {type(exc).__name__}: {exc}', exc_info=exc)

	task.add_done_callback(_on_done)
	return task
