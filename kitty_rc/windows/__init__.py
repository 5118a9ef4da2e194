from kitty_rc.windows.service import find_focused_window, iter_windows, parse_ls_response
from kitty_rc.windows.views import OsInstance, ProcessInfo, TabInfo, WindowInfo

__all__ = [
	'OsInstance',
	'ProcessInfo',
	'TabInfo',
	'WindowInfo',
	'find_focused_window',
	'iter_windows',
	'parse_ls_response',
]
