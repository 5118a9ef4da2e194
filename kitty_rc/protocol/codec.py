"""Encoding, chunking and decoding of remote control records.

A record is a single escape code::

	ESC P @kitty-cmd {"cmd": ..., "version": [...], "payload": {..., "data": "..."}} ESC \\

When a command carries an opaque payload it is always serialized as the last
member of the payload object, so the bytes of the record split cleanly into
an envelope header, the payload text and a short trailer. Streaming only ever
cuts the payload text; the envelope is never split.
"""

import base64
import json
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from kitty_rc.exceptions import ChunkOutOfOrderError, MalformedResponseError
from kitty_rc.protocol.views import DEFAULT_PROTOCOL_VERSION, PREFIX, STREAMING_THRESHOLD, SUFFIX, Chunk, Command, Message, Response

logger = logging.getLogger(__name__)

# json.dumps(..., separators=(',', ':')) of an envelope ending with an empty data member
_EMPTY_DATA_TAIL = '"data":""}}'


def _dumps(obj: Any) -> str:
	# ensure_ascii keeps ESC out of the JSON text, so SUFFIX can only appear at the end
	return json.dumps(obj, separators=(',', ':'), ensure_ascii=True)


def _payload_text(payload: bytes | str) -> bytes:
	if isinstance(payload, bytes):
		return base64.b64encode(payload)
	return _dumps(payload)[1:-1].encode('ascii')


def encode(command: Command) -> Message:
	"""Serialize a command into its wire record."""
	envelope: dict[str, Any] = {'cmd': command.verb, 'version': list(command.version)}
	if command.no_response:
		envelope['no_response'] = True
	if command.kitty_window_id is not None:
		envelope['kitty_window_id'] = command.kitty_window_id

	parameters = dict(command.parameters)
	if command.async_token is not None:
		parameters['async_id'] = command.async_token

	common = {'verb': command.verb, 'async_token': command.async_token, 'expects_response': not command.no_response}

	if command.payload is None:
		if parameters:
			envelope['payload'] = parameters
		record = PREFIX + _dumps(envelope).encode('ascii') + SUFFIX
		return Message(header=record, **common)

	# The data member must be the last one in both objects
	parameters.pop('data', None)
	parameters['data'] = ''
	envelope['payload'] = parameters
	text = _dumps(envelope)
	if not text.endswith(_EMPTY_DATA_TAIL):
		raise ValueError(f'Unexpected envelope layout for {command.verb}')

	split_at = len(text) - 3  # keep the opening quote of data in the header
	return Message(
		header=PREFIX + text[:split_at].encode('ascii'),
		body=_payload_text(command.payload),
		trailer=text[split_at:].encode('ascii') + SUFFIX,
		**common,
	)


def needs_streaming(message: Message) -> bool:
	return message.payload_size > STREAMING_THRESHOLD


def into_chunks(message: Message, chunk_size: int = STREAMING_THRESHOLD) -> list[Chunk]:
	"""Split a message into an ordered chunk sequence.

	Messages at or below the threshold come back as a single final chunk.
	Concatenating the data of the returned chunks always gives ``message.raw``.
	"""
	if not needs_streaming(message):
		return [Chunk(index=0, data=message.raw, final=True)]

	body = message.body
	pieces = [body[start : start + chunk_size] for start in range(0, len(body), chunk_size)]
	last = len(pieces) - 1

	chunks = []
	for index, piece in enumerate(pieces):
		data = piece
		if index == 0:
			data = message.header + data
		if index == last:
			data = data + message.trailer
		chunks.append(Chunk(index=index, data=data, final=index == last))

	logger.debug(f'Split {message.verb} ({message.payload_size} payload bytes) into {len(chunks)} chunks')
	return chunks


def reassemble(chunks: Iterable[Chunk]) -> bytes:
	"""Join a chunk sequence back into a record, rejecting gaps and reordering."""
	parts: list[bytes] = []
	finished = False
	for expected, chunk in enumerate(chunks):
		if finished:
			raise ChunkOutOfOrderError(f'Chunk {chunk.index} arrived after the final chunk')
		if chunk.index != expected:
			raise ChunkOutOfOrderError(f'Expected chunk {expected}, got chunk {chunk.index}')
		parts.append(chunk.data)
		finished = chunk.final

	if not parts:
		raise ChunkOutOfOrderError('Empty chunk sequence')
	if not finished:
		raise ChunkOutOfOrderError(f'Chunk sequence ended after {len(parts)} chunks without a final chunk')
	return b''.join(parts)


def decode_record(raw: bytes) -> dict[str, Any]:
	"""Strip the escape code envelope and parse the JSON object inside it."""
	if not raw.startswith(PREFIX) or not raw.endswith(SUFFIX) or len(raw) < len(PREFIX) + len(SUFFIX):
		raise MalformedResponseError('Record is not wrapped in a kitty-cmd escape code')
	try:
		obj = json.loads(raw[len(PREFIX) : -len(SUFFIX)].decode('utf-8'))
	except (UnicodeDecodeError, json.JSONDecodeError) as e:
		raise MalformedResponseError(f'Record does not contain valid JSON: {e}') from e
	if not isinstance(obj, dict):
		raise MalformedResponseError(f'Record is a JSON {type(obj).__name__}, expected an object')
	return obj


def decode_response(raw: bytes) -> Response:
	obj = decode_record(raw)
	try:
		return Response.model_validate(obj)
	except ValidationError as e:
		raise MalformedResponseError(f'Invalid response envelope: {e.error_count()} validation errors') from e


def decode_message(raw: bytes) -> Command:
	"""Rebuild a Command from a command record, as the peer would see it.

	A payload that was sent as bytes comes back as its base64 text.
	"""
	obj = decode_record(raw)
	verb = obj.get('cmd')
	if not isinstance(verb, str):
		raise MalformedResponseError('Command record has no cmd member')

	parameters = dict(obj.get('payload') or {})
	payload = parameters.pop('data', None)
	async_token = parameters.pop('async_id', None)
	try:
		return Command(
			verb=verb,
			parameters=parameters,
			payload=payload,
			async_token=async_token,
			version=tuple(obj.get('version') or DEFAULT_PROTOCOL_VERSION),
			no_response=bool(obj.get('no_response', False)),
			kitty_window_id=obj.get('kitty_window_id'),
		)
	except ValidationError as e:
		raise MalformedResponseError(f'Invalid command record: {e.error_count()} validation errors') from e
