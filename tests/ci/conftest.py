"""
Shared fixtures: an in-process fake kitty instance listening on a Unix socket.
"""

import asyncio
import json
import os
import shutil
import tempfile
from typing import Any

import pytest

from kitty_rc.protocol.codec import decode_record
from kitty_rc.protocol.views import PREFIX, SUFFIX

SAMPLE_LS = [
	{
		'id': 1,
		'platform_window_id': 8388621,
		'is_focused': True,
		'is_active': True,
		'last_focused': True,
		'wm_class': 'kitty',
		'background_opacity': 1.0,
		'future_os_field': 'kept',
		'tabs': [
			{
				'id': 1,
				'title': 'vim',
				'layout': 'tall',
				'layout_state': {'main_bias': [0.5]},
				'enabled_layouts': ['tall', 'stack'],
				'active_window_history': [1, 2],
				'is_focused': True,
				'is_active': True,
				'windows': [
					{
						'id': 1,
						'title': 'zsh',
						'pid': 4242,
						'cwd': '/home/user',
						'cmdline': ['/bin/zsh'],
						'env': {'TERM': 'xterm-kitty'},
						'foreground_processes': [{'pid': 4242, 'cmdline': ['/bin/zsh'], 'cwd': '/home/user'}],
						'is_focused': False,
						'is_active': False,
						'lines': 40,
						'columns': 120,
					},
					{
						'id': 2,
						'title': 'vim notes.md',
						'pid': 4300,
						'cwd': '/home/user/notes',
						'cmdline': ['/bin/zsh'],
						'foreground_processes': [{'pid': 4310, 'cmdline': ['vim', 'notes.md'], 'cwd': '/home/user/notes'}],
						'is_focused': True,
						'is_active': True,
						'at_prompt': False,
						'created_at': 1712345678,
					},
				],
			}
		],
	}
]


def _frame(obj: Any) -> bytes:
	return PREFIX + json.dumps(obj).encode() + SUFFIX


class FakeKitty:
	"""Speaks the remote control wire format well enough for client tests.

	Knobs:
		reject_probe: answer ls with ok=false, like an instance with remote control disabled.
		drop_verbs: close the socket instead of replying, for the first N commands of a verb (None = always).
		slow_verbs: sleep this many seconds before replying to a verb.
		fail_verbs: reply ok=false with this error.
		raw_replies: reply with these bytes verbatim.
		replies: reply data per verb.
	"""

	def __init__(self, socket_path: str):
		self.socket_path = socket_path
		self.records: list[dict[str, Any]] = []
		self.connections = 0
		self.reject_probe = False
		self.ls_data: Any = SAMPLE_LS
		self.drop_verbs: dict[str, int | None] = {}
		self.slow_verbs: dict[str, float] = {}
		self.fail_verbs: dict[str, str] = {}
		self.raw_replies: dict[str, bytes] = {}
		self.replies: dict[str, Any] = {}
		self._server: asyncio.Server | None = None
		self._writers: set[asyncio.StreamWriter] = set()

	def verbs(self) -> list[str]:
		return [record['cmd'] for record in self.records]

	def count(self, verb: str) -> int:
		return self.verbs().count(verb)

	async def start(self) -> None:
		self._server = await asyncio.start_unix_server(self._handle, path=self.socket_path, limit=16 * 1024 * 1024)

	async def stop(self) -> None:
		if self._server is None:
			return
		self._server.close()
		for writer in list(self._writers):
			writer.close()
		await self._server.wait_closed()
		self._server = None

	def _should_drop(self, verb: str) -> bool:
		if verb not in self.drop_verbs:
			return False
		remaining = self.drop_verbs[verb]
		if remaining is None:
			return True
		if remaining <= 0:
			return False
		self.drop_verbs[verb] = remaining - 1
		return True

	def _reply(self, record: dict[str, Any]) -> bytes:
		verb = record['cmd']
		if verb in self.raw_replies:
			return self.raw_replies[verb]
		if verb == 'ls' and self.reject_probe:
			reply: dict[str, Any] = {'ok': False, 'error': 'Remote control is disabled'}
		elif verb in self.fail_verbs:
			reply = {'ok': False, 'error': self.fail_verbs[verb], 'tb': 'Traceback (most recent call last): ...'}
		elif verb == 'ls':
			reply = {'ok': True, 'data': json.dumps(self.ls_data)}
		else:
			reply = {'ok': True, 'data': self.replies.get(verb)}
		async_id = (record.get('payload') or {}).get('async_id')
		if async_id:
			reply['async_id'] = async_id
		return _frame(reply)

	async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
		self.connections += 1
		self._writers.add(writer)
		try:
			while True:
				try:
					raw = await reader.readuntil(SUFFIX)
				except (asyncio.IncompleteReadError, ConnectionError):
					break
				record = decode_record(raw)
				self.records.append(record)
				verb = record['cmd']
				if self._should_drop(verb):
					break
				if verb in self.slow_verbs:
					await asyncio.sleep(self.slow_verbs[verb])
				if record.get('no_response'):
					continue
				writer.write(self._reply(record))
				await writer.drain()
		except ConnectionError:
			pass
		finally:
			self._writers.discard(writer)
			writer.close()


@pytest.fixture
def socket_dir():
	"""Short-lived directory for sockets; kept short because of the AF_UNIX path limit."""
	path = tempfile.mkdtemp(prefix='krc', dir='/tmp' if os.path.isdir('/tmp') else None)
	yield path
	shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def resolver(socket_dir):
	def _resolve(pid: int) -> str:
		return os.path.join(socket_dir, f'kitty-{pid}.sock')

	return _resolve


@pytest.fixture
async def kitty_factory(resolver):
	"""Start fake kitty instances by pid; all are stopped at teardown."""
	started: list[FakeKitty] = []

	async def _start(pid: int) -> FakeKitty:
		kitty = FakeKitty(resolver(pid))
		await kitty.start()
		started.append(kitty)
		return kitty

	yield _start
	for kitty in started:
		await kitty.stop()


@pytest.fixture
async def fake_kitty(kitty_factory):
	"""A fake kitty instance with pid 100."""
	return await kitty_factory(100)


@pytest.fixture
def ls_data():
	return json.loads(json.dumps(SAMPLE_LS))
