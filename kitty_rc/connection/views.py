from enum import Enum


class ConnectionState(str, Enum):
	"""Lifecycle of a Connection.

	DISCONNECTED -> CONNECTING -> READY -> BROKEN -> DISCONNECTED (after close).
	A BROKEN connection is never reused.
	"""

	DISCONNECTED = 'disconnected'
	CONNECTING = 'connecting'
	READY = 'ready'
	BROKEN = 'broken'
