"""
Tests for record encoding, payload streaming and decoding.
"""

import base64
import json

import pytest

from kitty_rc.commands import FocusWindowCommand, LsCommand, SendTextCommand, SetBackgroundImageCommand
from kitty_rc.exceptions import ChunkOutOfOrderError, CommandFailedError, MalformedResponseError
from kitty_rc.protocol.codec import decode_message, decode_record, decode_response, encode, into_chunks, needs_streaming, reassemble
from kitty_rc.protocol.views import PREFIX, STREAMING_THRESHOLD, SUFFIX, Chunk, Response


def _image(size: int) -> bytes:
	return bytes(i % 251 for i in range(size))


class TestEncode:
	"""Wire records for commands with and without payloads."""

	def test_plain_command_record(self):
		message = encode(LsCommand().build())
		assert message.raw == PREFIX + b'{"cmd":"ls","version":[0,43,1]}' + SUFFIX
		assert message.body == b''
		assert not needs_streaming(message)

	def test_parameters_and_envelope_options(self):
		message = encode(FocusWindowCommand().match_spec('id:3').no_response().kitty_window_id(9).build())
		record = decode_record(message.raw)
		assert record == {
			'cmd': 'focus-window',
			'version': [0, 43, 1],
			'no_response': True,
			'kitty_window_id': '9',
			'payload': {'match': 'id:3'},
		}
		assert message.expects_response is False

	def test_async_token_travels_in_payload(self):
		message = encode(LsCommand().async_token('tok-1').build())
		assert decode_record(message.raw)['payload'] == {'async_id': 'tok-1'}
		assert message.async_token == 'tok-1'

	def test_payload_is_last_member(self):
		message = encode(SendTextCommand('hello').match_spec('id:1').build())
		assert message.body == b'hello'
		assert message.header.endswith(b'"data":"')
		assert message.trailer == b'"}}' + SUFFIX
		assert decode_record(message.raw)['payload'] == {'match': 'id:1', 'data': 'hello'}

	def test_text_payload_is_escaped(self):
		message = encode(SendTextCommand('héllo\x1b[0m\n').build())
		# Only the framing contains ESC; the text is JSON-escaped ASCII
		assert message.raw.count(b'\x1b') == 2
		assert decode_record(message.raw)['payload']['data'] == 'héllo\x1b[0m\n'

	def test_bytes_payload_is_base64(self):
		image = _image(300)
		message = encode(SetBackgroundImageCommand(image).build())
		assert base64.b64decode(message.body) == image


class TestChunking:
	"""Large payloads are split into ordered chunks that reassemble exactly."""

	def test_small_message_is_single_final_chunk(self):
		message = encode(SendTextCommand('a' * STREAMING_THRESHOLD).build())
		assert not needs_streaming(message)
		chunks = into_chunks(message)
		assert chunks == [Chunk(index=0, data=message.raw, final=True)]

	def test_threshold_is_exclusive(self):
		message = encode(SendTextCommand('a' * (STREAMING_THRESHOLD + 1)).build())
		assert needs_streaming(message)
		assert len(into_chunks(message)) == 2

	def test_large_image_is_streamed_and_reassembled(self):
		image = _image(5000)
		message = encode(SetBackgroundImageCommand(image).build())

		assert needs_streaming(message)
		chunks = into_chunks(message)
		assert len(chunks) >= 2
		assert [chunk.index for chunk in chunks] == list(range(len(chunks)))
		assert [chunk.final for chunk in chunks] == [False] * (len(chunks) - 1) + [True]

		# The envelope is never split: it is entirely in the first chunk
		assert chunks[0].data == message.header + message.body[:STREAMING_THRESHOLD]
		assert chunks[-1].data.endswith(message.trailer)

		raw = reassemble(chunks)
		assert raw == message.raw
		rebuilt = decode_message(raw)
		assert rebuilt.verb == 'set-background-image'
		assert base64.b64decode(rebuilt.payload) == image

	def test_custom_chunk_size(self):
		message = encode(SendTextCommand('b' * 10000).build())
		chunks = into_chunks(message, chunk_size=1000)
		assert len(chunks) == 10
		assert reassemble(chunks) == message.raw


class TestReassemble:
	"""Chunk sequences with gaps or bad ordering are rejected."""

	@pytest.fixture
	def chunks(self):
		return into_chunks(encode(SendTextCommand('c' * 9000).build()))

	def test_reordered(self, chunks):
		with pytest.raises(ChunkOutOfOrderError):
			reassemble([chunks[1], chunks[0], chunks[2]])

	def test_gap(self, chunks):
		with pytest.raises(ChunkOutOfOrderError):
			reassemble([chunks[0], chunks[2]])

	def test_missing_final(self, chunks):
		with pytest.raises(ChunkOutOfOrderError):
			reassemble(chunks[:-1])

	def test_data_after_final(self, chunks):
		extra = Chunk(index=len(chunks), data=b'x', final=True)
		with pytest.raises(ChunkOutOfOrderError):
			reassemble([*chunks, extra])

	def test_empty(self):
		with pytest.raises(ChunkOutOfOrderError):
			reassemble([])


class TestDecode:
	"""Replies from the terminal."""

	def test_response(self):
		raw = PREFIX + json.dumps({'ok': True, 'data': 'x', 'unknown': 1}).encode() + SUFFIX
		response = decode_response(raw)
		assert response.ok is True
		assert response.data == 'x'

	@pytest.mark.parametrize(
		'raw',
		[
			b'garbage',
			PREFIX + b'{not json' + SUFFIX,
			PREFIX + b'[1, 2]' + SUFFIX,
			PREFIX + b'{"data": 1}' + SUFFIX,
		],
	)
	def test_malformed(self, raw):
		with pytest.raises(MalformedResponseError):
			decode_response(raw)

	def test_failed_response_raises(self):
		response = Response(ok=False, error='No matching windows', tb='Traceback ...')
		with pytest.raises(CommandFailedError) as exc_info:
			response.raise_for_error(target=100, verb='focus-window')
		assert exc_info.value.traceback == 'Traceback ...'
		assert 'target=100' in str(exc_info.value)

	def test_ok_response_passes_through(self):
		response = Response(ok=True)
		assert response.raise_for_error() is response

	def test_decode_message_round_trip(self):
		command = FocusWindowCommand().match_spec('id:3').async_token('t').build()
		rebuilt = decode_message(encode(command).raw)
		assert rebuilt == command
