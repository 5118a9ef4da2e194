"""
Tests for a single connection against the fake kitty peer.
"""

import asyncio
import base64
import os
import socket

import pytest

from kitty_rc.commands import FocusWindowCommand, LsCommand, SetBackgroundImageCommand
from kitty_rc.connection import Connection, ConnectionState
from kitty_rc.exceptions import ConnectionLostError, ConnectionTimeoutError, SocketNotFoundError, SocketRefusedError
from kitty_rc.protocol.codec import encode


class TestConnect:
	"""Opening a connection and the liveness probe."""

	@pytest.mark.asyncio
	async def test_connect_probes_peer(self, fake_kitty):
		connection = await Connection.connect(100, fake_kitty.socket_path, timeout=2)
		try:
			assert connection.state == ConnectionState.READY
			assert fake_kitty.records == [{'cmd': 'ls', 'version': [0, 43, 1], 'payload': {'self': True}}]
		finally:
			await connection.close()
		assert connection.state == ConnectionState.DISCONNECTED

	@pytest.mark.asyncio
	async def test_connect_without_probe(self, fake_kitty):
		connection = await Connection.connect(100, fake_kitty.socket_path, timeout=2, probe=False)
		await connection.close()
		assert fake_kitty.records == []

	@pytest.mark.asyncio
	async def test_missing_socket(self, resolver):
		with pytest.raises(SocketNotFoundError) as exc_info:
			await Connection.connect(200, resolver(200), timeout=1)
		assert exc_info.value.target == 200

	@pytest.mark.asyncio
	async def test_refused(self, resolver):
		path = resolver(300)
		# Bound but not listening: connect() is refused
		sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
		sock.bind(path)
		try:
			with pytest.raises(SocketRefusedError):
				await Connection.connect(300, path, timeout=1)
		finally:
			sock.close()
			os.unlink(path)

	@pytest.mark.asyncio
	async def test_probe_rejected(self, fake_kitty):
		fake_kitty.reject_probe = True
		with pytest.raises(SocketRefusedError) as exc_info:
			await Connection.connect(100, fake_kitty.socket_path, timeout=2)
		assert 'Remote control is disabled' in str(exc_info.value)


class TestExchange:
	"""Sending commands and reading replies."""

	@pytest.fixture
	async def connection(self, fake_kitty):
		connection = await Connection.connect(100, fake_kitty.socket_path, timeout=1)
		yield connection
		await connection.close()

	@pytest.mark.asyncio
	async def test_execute_returns_reply(self, connection, fake_kitty):
		fake_kitty.replies['get-colors'] = 'background #000000'
		before = connection.last_used
		response = await connection.execute(encode(FocusWindowCommand().build()))
		assert response.ok is True

		from kitty_rc.commands import GetColorsCommand

		response = await connection.execute(encode(GetColorsCommand().build()))
		assert response.data == 'background #000000'
		assert connection.last_used >= before

	@pytest.mark.asyncio
	async def test_streamed_payload_arrives_intact(self, connection, fake_kitty):
		image = os.urandom(5000)
		response = await connection.execute(encode(SetBackgroundImageCommand(image).build()))
		assert response.ok is True
		record = fake_kitty.records[-1]
		assert record['cmd'] == 'set-background-image'
		assert base64.b64decode(record['payload']['data']) == image

	@pytest.mark.asyncio
	async def test_no_response_keeps_stream_aligned(self, connection, fake_kitty):
		assert await connection.execute(encode(FocusWindowCommand().no_response().build())) is None
		response = await connection.execute(encode(LsCommand().build()))
		assert response.ok is True
		assert fake_kitty.verbs() == ['ls', 'focus-window', 'ls']

	@pytest.mark.asyncio
	async def test_peer_drop_breaks_connection(self, connection, fake_kitty):
		fake_kitty.drop_verbs['focus-window'] = None
		with pytest.raises(ConnectionLostError) as exc_info:
			await connection.execute(encode(FocusWindowCommand().build()))
		assert exc_info.value.verb == 'focus-window'
		assert connection.state == ConnectionState.BROKEN

		# A broken connection is never reused
		with pytest.raises(ConnectionLostError):
			await connection.execute(encode(LsCommand().build()))

	@pytest.mark.asyncio
	async def test_reply_timeout(self, fake_kitty):
		connection = await Connection.connect(100, fake_kitty.socket_path, timeout=1, command_timeout=0.1)
		fake_kitty.slow_verbs['focus-window'] = 1.0
		try:
			with pytest.raises(ConnectionTimeoutError) as exc_info:
				await connection.execute(encode(FocusWindowCommand().build()))
			assert exc_info.value.timeout == 0.1
			assert connection.state == ConnectionState.BROKEN
		finally:
			await connection.close()

	@pytest.mark.asyncio
	async def test_cancellation_breaks_connection(self, connection, fake_kitty):
		fake_kitty.slow_verbs['focus-window'] = 0.5
		task = asyncio.create_task(connection.execute(encode(FocusWindowCommand().build())))
		await asyncio.sleep(0.1)
		task.cancel()
		with pytest.raises(asyncio.CancelledError):
			await task
		assert connection.state == ConnectionState.BROKEN

	@pytest.mark.asyncio
	async def test_close_is_idempotent(self, connection):
		await connection.close()
		await connection.close()
		assert connection.state == ConnectionState.DISCONNECTED


class TestAsyncReplies:
	"""Out-of-band replies matched by async token."""

	@pytest.mark.asyncio
	async def test_wait_async(self, fake_kitty):
		connection = await Connection.connect(100, fake_kitty.socket_path, timeout=1)
		try:
			await connection.send(encode(FocusWindowCommand().async_token('tok-1').build()))
			response = await connection.wait_async('tok-1')
			assert response.async_id == 'tok-1'
		finally:
			await connection.close()

	@pytest.mark.asyncio
	async def test_async_reply_stashed_during_other_exchange(self, fake_kitty):
		connection = await Connection.connect(100, fake_kitty.socket_path, timeout=1)
		try:
			await connection.send(encode(FocusWindowCommand().async_token('tok-2').build()))
			# The async reply arrives first and is kept aside
			response = await connection.execute(encode(LsCommand().build()))
			assert response.async_id is None
			assert response.ok is True

			stashed = await connection.wait_async('tok-2')
			assert stashed.async_id == 'tok-2'
		finally:
			await connection.close()
