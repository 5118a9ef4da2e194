"""Mappable actions, the same ones that can be bound to keys in kitty.conf.

The wire form is a single string: the action name followed by its arguments,
separated by spaces. The helpers below build the common ones.
"""

from typing import Self

from kitty_rc.commands.base import CommandBuilder, MatchMixin


class ActionCommand(MatchMixin, CommandBuilder):
	verb = 'action'
	required = ('action',)

	def __init__(self, action: str, *args: str | int | float):
		super().__init__()
		self._name = action
		self._args = [str(arg) for arg in args]
		self._set('action', self._joined())

	def _joined(self) -> str:
		return ' '.join([self._name, *self._args]) if self._name else ''

	def arg(self, value: str | int | float) -> Self:
		self._args.append(str(value))
		return self._set('action', self._joined())

	def validate(self) -> None:
		if any(char.isspace() for char in self._name):
			raise self._invalid('action', f'action name {self._name!r} contains whitespace')


# Tabs


def new_tab() -> ActionCommand:
	return ActionCommand('new_tab')


def close_tab() -> ActionCommand:
	return ActionCommand('close_tab')


def next_tab() -> ActionCommand:
	return ActionCommand('next_tab')


def previous_tab() -> ActionCommand:
	return ActionCommand('previous_tab')


def goto_tab(number: int) -> ActionCommand:
	"""Go to the tab at ``number`` (1-based); 0 goes to the previously active tab."""
	return ActionCommand('goto_tab', number)


def set_tab_title(title: str) -> ActionCommand:
	return ActionCommand('set_tab_title', title)


def move_tab_forward() -> ActionCommand:
	return ActionCommand('move_tab_forward')


def move_tab_backward() -> ActionCommand:
	return ActionCommand('move_tab_backward')


# Windows


def new_window() -> ActionCommand:
	return ActionCommand('new_window')


def close_window() -> ActionCommand:
	return ActionCommand('close_window')


def next_window() -> ActionCommand:
	return ActionCommand('next_window')


def previous_window() -> ActionCommand:
	return ActionCommand('previous_window')


def neighboring_window(direction: str) -> ActionCommand:
	return ActionCommand('neighboring_window', direction)


def toggle_fullscreen() -> ActionCommand:
	return ActionCommand('toggle_fullscreen')


def toggle_maximized() -> ActionCommand:
	return ActionCommand('toggle_maximized')


# Layouts


def next_layout() -> ActionCommand:
	return ActionCommand('next_layout')


def last_used_layout() -> ActionCommand:
	return ActionCommand('last_used_layout')


def goto_layout(layout: str) -> ActionCommand:
	return ActionCommand('goto_layout', layout)


def toggle_layout(layout: str) -> ActionCommand:
	return ActionCommand('toggle_layout', layout)


# Fonts and appearance


def change_font_size(delta: str, all_windows: bool = False) -> ActionCommand:
	"""Change the font size by ``delta``, e.g. ``'+2'``, ``'-1'`` or ``'0'`` to reset."""
	return ActionCommand('change_font_size', 'all' if all_windows else 'current', delta)


def set_background_opacity(opacity: str) -> ActionCommand:
	return ActionCommand('set_background_opacity', opacity)


def clear_terminal(mode: str = 'reset', scope: str = 'active') -> ActionCommand:
	return ActionCommand('clear_terminal', mode, scope)


# Session


def quit() -> ActionCommand:
	return ActionCommand('quit')


def load_config_file(path: str | None = None) -> ActionCommand:
	if path is None:
		return ActionCommand('load_config_file')
	return ActionCommand('load_config_file', path)
