from kitty_rc.protocol.codec import decode_message, decode_record, decode_response, encode, into_chunks, needs_streaming, reassemble
from kitty_rc.protocol.views import PREFIX, STREAMING_THRESHOLD, SUFFIX, Chunk, Command, Message, Response

__all__ = [
	'PREFIX',
	'SUFFIX',
	'STREAMING_THRESHOLD',
	'Chunk',
	'Command',
	'Message',
	'Response',
	'decode_message',
	'decode_record',
	'decode_response',
	'encode',
	'into_chunks',
	'needs_streaming',
	'reassemble',
]
