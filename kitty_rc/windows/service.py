import json
import logging
from collections.abc import Iterable, Iterator

from pydantic import TypeAdapter, ValidationError

from kitty_rc.exceptions import MalformedResponseError
from kitty_rc.protocol.views import Response
from kitty_rc.windows.views import OsInstance, TabInfo, WindowInfo

logger = logging.getLogger(__name__)

_instances_adapter = TypeAdapter(list[OsInstance])


def parse_ls_response(response: Response) -> list[OsInstance]:
	"""Rebuild the OS window -> tab -> window hierarchy from an ``ls`` reply.

	Ordering at every level is the terminal's own (on-screen / creation order).

	Args:
		response: Reply to an ``ls`` command. ``data`` may be the decoded list or
			the JSON document as a string, which is how kitty sends it.

	Returns:
		The OS windows of the instance.

	Raises:
		CommandFailedError: The terminal rejected the command.
		MalformedResponseError: The data does not have the expected shape.
	"""
	response.raise_for_error(verb='ls')

	data = response.data
	if isinstance(data, str):
		try:
			data = json.loads(data)
		except json.JSONDecodeError as e:
			raise MalformedResponseError(f'ls data is not valid JSON: {e}', verb='ls') from e
	if not isinstance(data, list):
		raise MalformedResponseError(f'ls data must be a list of OS windows, got {type(data).__name__}', verb='ls')

	try:
		instances = _instances_adapter.validate_python(data)
	except ValidationError as e:
		first = e.errors()[0]
		location = '.'.join(str(part) for part in first['loc'])
		raise MalformedResponseError(f'Unexpected ls structure at {location}: {first["msg"]}', verb='ls') from e

	logger.debug(f'Parsed ls reply: {len(instances)} OS windows, {sum(len(i.tabs) for i in instances)} tabs')
	return instances


def iter_windows(instances: Iterable[OsInstance]) -> Iterator[tuple[OsInstance, TabInfo, WindowInfo]]:
	"""Yield every window with the OS window and tab that own it, in order."""
	for instance in instances:
		for tab in instance.tabs:
			for window in tab.windows:
				yield instance, tab, window


def find_focused_window(instances: Iterable[OsInstance]) -> WindowInfo | None:
	"""The window with keyboard focus, falling back to the active window of the active tab."""
	instances = list(instances)
	for _, _, window in iter_windows(instances):
		if window.is_focused:
			return window
	for instance in instances:
		if not (instance.is_focused or instance.is_active):
			continue
		for tab in instance.tabs:
			if not tab.is_active:
				continue
			for window in tab.windows:
				if window.is_active:
					return window
	return None
