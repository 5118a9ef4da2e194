"""Async client for the kitty terminal remote control protocol."""

import logging

from kitty_rc.commands import CommandBuilder
from kitty_rc.config import RegistryConfig
from kitty_rc.connection import Connection, ConnectionState
from kitty_rc.exceptions import (
	ChunkOutOfOrderError,
	CommandError,
	CommandFailedError,
	ConnectionLostError,
	ConnectionTimeoutError,
	DeadlineExceededError,
	InvalidValueError,
	KittyConnectionError,
	KittyError,
	MalformedResponseError,
	MaxRetriesExceededError,
	MissingParameterError,
	PoolExhaustedError,
	ProtocolError,
	RegistryClosedError,
	SocketNotFoundError,
	SocketRefusedError,
)
from kitty_rc.logging_config import setup_logging
from kitty_rc.protocol import Chunk, Command, Message, Response, encode, into_chunks, needs_streaming, reassemble
from kitty_rc.registry import ConnectionRegistry, Status, StatusKind
from kitty_rc.utils import default_socket_path
from kitty_rc.windows import OsInstance, ProcessInfo, TabInfo, WindowInfo, find_focused_window, parse_ls_response

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = '0.1.0'

__all__ = [
	'Chunk',
	'Command',
	'CommandBuilder',
	'Connection',
	'ConnectionRegistry',
	'ConnectionState',
	'Message',
	'OsInstance',
	'ProcessInfo',
	'RegistryConfig',
	'Response',
	'Status',
	'StatusKind',
	'TabInfo',
	'WindowInfo',
	'default_socket_path',
	'encode',
	'find_focused_window',
	'into_chunks',
	'needs_streaming',
	'parse_ls_response',
	'reassemble',
	'setup_logging',
	# errors
	'ChunkOutOfOrderError',
	'CommandError',
	'CommandFailedError',
	'ConnectionLostError',
	'ConnectionTimeoutError',
	'DeadlineExceededError',
	'InvalidValueError',
	'KittyConnectionError',
	'KittyError',
	'MalformedResponseError',
	'MaxRetriesExceededError',
	'MissingParameterError',
	'PoolExhaustedError',
	'ProtocolError',
	'RegistryClosedError',
	'SocketNotFoundError',
	'SocketRefusedError',
]
