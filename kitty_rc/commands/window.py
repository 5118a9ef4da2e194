"""Window commands: listing, input, focus, titles, scrolling and markers."""

import re
from typing import TYPE_CHECKING, Any, Self

from kitty_rc.commands.base import AllMixin, CommandBuilder, MatchMixin, MatchTabMixin, StreamingPayloadMixin

if TYPE_CHECKING:
	from kitty_rc.protocol.views import Response
	from kitty_rc.windows.views import OsInstance

RESIZE_AXES = ('horizontal', 'vertical', 'reset')
TEXT_EXTENTS = ('screen', 'all', 'selection', 'first_cmd_output_on_screen', 'last_cmd_output', 'last_visited_cmd_output', 'last_non_empty_output')
SCROLL_UNITS = ('l', 'p', 'u', 'r')

_SCROLL_AMOUNT_RE = re.compile(r'^(-?\d+(?:\.\d+)?)([lpur]?)$')


class LsCommand(MatchMixin, MatchTabMixin, CommandBuilder):
	"""List OS windows, their tabs and their windows."""

	verb = 'ls'

	def all_env_vars(self, value: bool = True) -> Self:
		return self._flag('all_env_vars', value)

	@staticmethod
	def parse_response(response: 'Response') -> list['OsInstance']:
		"""Project an ls reply into the typed window hierarchy."""
		from kitty_rc.windows.service import parse_ls_response

		return parse_ls_response(response)


class SendTextCommand(MatchMixin, MatchTabMixin, AllMixin, CommandBuilder):
	"""Send text to windows as if it had been typed.

	The text travels in the trailing data field, so long pastes are streamed
	in chunks like any other large payload.
	"""

	verb = 'send-text'
	required = ('data',)
	defaults = {'bracketed_paste': 'disable'}

	def __init__(self, data: str):
		super().__init__()
		self._payload = data
		self._parameters['bracketed_paste'] = 'disable'

	def exclude_active(self, value: bool = True) -> Self:
		return self._flag('exclude_active', value)

	def bracketed_paste(self, mode: str) -> Self:
		return self._set('bracketed_paste', mode)

	def validate(self) -> None:
		if self._parameters.get('bracketed_paste') not in ('disable', 'auto', 'enable'):
			raise self._invalid('bracketed_paste', "must be one of 'disable', 'auto', 'enable'")


class SendKeyCommand(MatchMixin, MatchTabMixin, AllMixin, CommandBuilder):
	verb = 'send-key'
	required = ('keys',)

	def __init__(self, keys: str | list[str]):
		super().__init__()
		self._set('keys', keys)

	def exclude_active(self, value: bool = True) -> Self:
		return self._flag('exclude_active', value)


class CloseWindowCommand(MatchMixin, CommandBuilder):
	verb = 'close-window'

	def ignore_no_match(self, value: bool = True) -> Self:
		return self._flag('ignore_no_match', value)


class ResizeWindowCommand(MatchMixin, CommandBuilder):
	"""Grow or shrink a window along one axis, in cells."""

	verb = 'resize-window'

	def __init__(self, increment: int = 2, axis: str = 'horizontal'):
		super().__init__()
		self._set('increment', increment)
		self._set('axis', axis)

	def increment(self, value: int) -> Self:
		return self._set('increment', value)

	def axis(self, value: str) -> Self:
		return self._set('axis', value)

	def validate(self) -> None:
		axis = self._parameters.get('axis')
		if axis not in RESIZE_AXES:
			raise self._invalid('axis', f'must be one of {", ".join(RESIZE_AXES)}, got {axis!r}')
		if not isinstance(self._parameters.get('increment'), int):
			raise self._invalid('increment', 'must be an integer')


class FocusWindowCommand(MatchMixin, CommandBuilder):
	verb = 'focus-window'


class SetWindowTitleCommand(MatchMixin, CommandBuilder):
	verb = 'set-window-title'
	required = ('title',)

	def __init__(self, title: str):
		super().__init__()
		self._set('title', title)

	def temporary(self, value: bool = True) -> Self:
		return self._flag('temporary', value)


class NewWindowCommand(MatchMixin, CommandBuilder):
	"""Open a new window, optionally in a new tab."""

	verb = 'new-window'

	def args(self, args: list[str]) -> Self:
		return self._set('args', args)

	def title(self, value: str) -> Self:
		return self._set('title', value)

	def cwd(self, value: str) -> Self:
		return self._set('cwd', value)

	def keep_focus(self, value: bool = True) -> Self:
		return self._flag('keep_focus', value)

	def window_type(self, value: str) -> Self:
		return self._set('window_type', value)

	def new_tab(self, value: bool = True) -> Self:
		return self._flag('new_tab', value)

	def tab_title(self, value: str) -> Self:
		return self._set('tab_title', value)

	def validate(self) -> None:
		window_type = self._parameters.get('window_type')
		if window_type is not None and window_type not in ('kitty', 'os'):
			raise self._invalid('window_type', "must be 'kitty' or 'os'")


class GetTextCommand(MatchMixin, CommandBuilder):
	verb = 'get-text'

	def extent(self, value: str) -> Self:
		return self._set('extent', value)

	def ansi(self, value: bool = True) -> Self:
		return self._flag('ansi', value)

	def cursor(self, value: bool = True) -> Self:
		return self._flag('cursor', value)

	def wrap_markers(self, value: bool = True) -> Self:
		return self._flag('wrap_markers', value)

	def clear_selection(self, value: bool = True) -> Self:
		return self._flag('clear_selection', value)

	def validate(self) -> None:
		extent = self._parameters.get('extent')
		if extent is not None and extent not in TEXT_EXTENTS:
			raise self._invalid('extent', f'unknown extent {extent!r}')


class ScrollWindowCommand(MatchMixin, CommandBuilder):
	"""Scroll a window.

	Args:
		amount: ``start``, ``end`` or a number with an optional unit suffix:
			``l`` lines (the default), ``p`` pages, ``u`` unscroll, ``r`` prompts.
			Negative numbers scroll up.
	"""

	verb = 'scroll-window'
	required = ('amount',)

	def __init__(self, amount: str | int):
		super().__init__()
		self._amount = str(amount)
		self._set('amount', self._amount)

	def validate(self) -> None:
		if self._amount not in ('start', 'end') and _SCROLL_AMOUNT_RE.match(self._amount) is None:
			raise self._invalid('amount', f'cannot parse scroll amount {self._amount!r}')

	def _wire_parameters(self, parameters: dict[str, Any]) -> dict[str, Any]:
		if self._amount in ('start', 'end'):
			parameters['amount'] = [self._amount, None]
			return parameters
		match = _SCROLL_AMOUNT_RE.match(self._amount)
		assert match is not None
		number, unit = match.groups()
		value: int | float = float(number) if '.' in number else int(number)
		parameters['amount'] = [value, unit or 'l']
		return parameters


class SetWindowLogoCommand(MatchMixin, StreamingPayloadMixin, CommandBuilder):
	"""Set or clear the logo shown in a window; the PNG bytes are streamed."""

	verb = 'set-window-logo'

	def position(self, value: str) -> Self:
		return self._set('position', value)

	def alpha(self, value: float) -> Self:
		return self._set('alpha', value)

	def validate(self) -> None:
		alpha = self._parameters.get('alpha')
		if alpha is not None and not 0.0 <= alpha <= 1.0:
			raise self._invalid('alpha', 'must be between 0.0 and 1.0')


class DetachWindowCommand(MatchMixin, CommandBuilder):
	verb = 'detach-window'

	def target_tab(self, spec: str) -> Self:
		return self._set('target_tab', spec)


class SelectWindowCommand(MatchMixin, CommandBuilder):
	"""Ask the user to pick a window; the reply carries the chosen window id."""

	verb = 'select-window'

	def title(self, value: str) -> Self:
		return self._set('title', value)

	def exclude_active(self, value: bool = True) -> Self:
		return self._flag('exclude_active', value)

	def reactivate_prev_tab(self, value: bool = True) -> Self:
		return self._flag('reactivate_prev_tab', value)


class CreateMarkerCommand(MatchMixin, CommandBuilder):
	verb = 'create-marker'
	required = ('marker_spec',)

	def __init__(self, marker_spec: list[str] | str):
		super().__init__()
		if isinstance(marker_spec, str):
			marker_spec = marker_spec.split()
		self._set('marker_spec', marker_spec)


class RemoveMarkerCommand(MatchMixin, CommandBuilder):
	verb = 'remove-marker'
