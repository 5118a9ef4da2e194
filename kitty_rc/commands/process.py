"""Process and launch commands: running programs, kittens, environment and config."""

from typing import Any, Self

from kitty_rc.commands.base import AllMixin, CommandBuilder, MatchMixin, MatchTabMixin, MatchWindowMixin, StreamingPayloadMixin

LAUNCH_TYPES = ('window', 'tab', 'os-window', 'overlay', 'overlay-main', 'background', 'clipboard', 'primary')
OS_WINDOW_ACTIONS = ('resize', 'toggle-fullscreen', 'toggle-maximized', 'toggle-visibility', 'hide', 'show')
LIGATURE_STRATEGIES = ('never', 'always', 'cursor')


class RunCommand(StreamingPayloadMixin, CommandBuilder):
	"""Run a program and collect its output; ``data`` is fed to its stdin."""

	verb = 'run'

	def cmdline(self, value: str) -> Self:
		return self._set('cmdline', value)

	def env(self, value: dict[str, str]) -> Self:
		return self._set('env', dict(value))

	def allow_remote_control(self, value: bool = True) -> Self:
		return self._flag('allow_remote_control', value)

	def remote_control_password(self, value: str) -> Self:
		return self._set('remote_control_password', value)


class KittenCommand(MatchMixin, CommandBuilder):
	verb = 'kitten'
	required = ('args',)

	def __init__(self, args: str | list[str]):
		super().__init__()
		if isinstance(args, list):
			args = ' '.join(args)
		self._set('args', args)


class LaunchCommand(MatchMixin, CommandBuilder):
	"""Launch a program in a new window, tab, overlay or in the background.

	Only the most used options have dedicated setters; any other launch option
	can be passed through option().
	"""

	verb = 'launch'

	def args(self, args: list[str] | str) -> Self:
		if isinstance(args, list):
			args = ' '.join(args)
		return self._set('args', args)

	def window_type(self, value: str) -> Self:
		return self._set('window_type', value)

	def window_title(self, value: str) -> Self:
		return self._set('window_title', value)

	def tab_title(self, value: str) -> Self:
		return self._set('tab_title', value)

	def cwd(self, value: str) -> Self:
		return self._set('cwd', value)

	def env(self, value: dict[str, str]) -> Self:
		return self._set('env', dict(value))

	def var(self, value: dict[str, str]) -> Self:
		return self._set('var', dict(value))

	def location(self, value: str) -> Self:
		return self._set('location', value)

	def keep_focus(self, value: bool = True) -> Self:
		return self._flag('keep_focus', value)

	def hold(self, value: bool = True) -> Self:
		return self._flag('hold', value)

	def copy_env(self, value: bool = True) -> Self:
		return self._flag('copy_env', value)

	def allow_remote_control(self, value: bool = True) -> Self:
		return self._flag('allow_remote_control', value)

	def logo_alpha(self, value: float) -> Self:
		return self._set('logo_alpha', value)

	def option(self, name: str, value: Any) -> Self:
		return self._set(name, value)

	def validate(self) -> None:
		window_type = self._parameters.get('window_type')
		if window_type is not None and window_type not in LAUNCH_TYPES:
			raise self._invalid('window_type', f'must be one of {", ".join(LAUNCH_TYPES)}')
		alpha = self._parameters.get('logo_alpha')
		if alpha is not None and not 0.0 <= alpha <= 1.0:
			raise self._invalid('logo_alpha', 'must be between 0.0 and 1.0')


class EnvCommand(CommandBuilder):
	"""Change the environment of programs launched from now on."""

	verb = 'env'
	required = ('env',)

	def __init__(self, env: dict[str, str]):
		super().__init__()
		self._set('env', dict(env))


class SetUserVarsCommand(MatchMixin, CommandBuilder):
	"""Set user variables on windows.

	Args:
		var: ``NAME=VALUE`` entries; a bare ``NAME`` removes the variable.
	"""

	verb = 'set-user-vars'
	required = ('var',)

	def __init__(self, var: list[str] | dict[str, str]):
		super().__init__()
		if isinstance(var, dict):
			var = [f'{name}={value}' for name, value in var.items()]
		self._set('var', list(var))


class LoadConfigCommand(CommandBuilder):
	"""Reload the configuration, from the given files when paths are set."""

	verb = 'load-config'

	def __init__(self, paths: list[str] | None = None):
		super().__init__()
		if paths:
			self._set('paths', list(paths))

	def override(self, settings: list[str]) -> Self:
		return self._set('override', list(settings))

	def ignore_overrides(self, value: bool = True) -> Self:
		return self._flag('ignore_overrides', value)


class ResizeOsWindowCommand(MatchMixin, CommandBuilder):
	verb = 'resize-os-window'

	def action(self, value: str) -> Self:
		return self._set('action', value)

	def unit(self, value: str) -> Self:
		return self._set('unit', value)

	def width(self, value: int) -> Self:
		return self._set('width', value)

	def height(self, value: int) -> Self:
		return self._set('height', value)

	def incremental(self, value: bool = True) -> Self:
		return self._flag('incremental', value)

	def validate(self) -> None:
		action = self._parameters.get('action')
		if action is not None and action not in OS_WINDOW_ACTIONS:
			raise self._invalid('action', f'must be one of {", ".join(OS_WINDOW_ACTIONS)}')
		unit = self._parameters.get('unit')
		if unit is not None and unit not in ('cells', 'pixels'):
			raise self._invalid('unit', "must be 'cells' or 'pixels'")


class DisableLigaturesCommand(MatchWindowMixin, MatchTabMixin, AllMixin, CommandBuilder):
	verb = 'disable-ligatures'

	def strategy(self, value: str) -> Self:
		return self._set('strategy', value)

	def validate(self) -> None:
		strategy = self._parameters.get('strategy')
		if strategy is not None and strategy not in LIGATURE_STRATEGIES:
			raise self._invalid('strategy', f'must be one of {", ".join(LIGATURE_STRATEGIES)}')


class SignalChildCommand(MatchMixin, CommandBuilder):
	"""Send signals to the foreground process of matching windows."""

	verb = 'signal-child'
	required = ('signals',)

	def __init__(self, signals: list[int | str]):
		super().__init__()
		self._set('signals', list(signals))
