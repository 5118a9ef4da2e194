from kitty_rc.registry.service import ConnectionRegistry
from kitty_rc.registry.views import Status, StatusKind

__all__ = ['ConnectionRegistry', 'Status', 'StatusKind']
