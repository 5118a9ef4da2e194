from kitty_rc.connection.service import Connection
from kitty_rc.connection.views import ConnectionState

__all__ = ['Connection', 'ConnectionState']
