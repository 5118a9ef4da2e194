"""Appearance commands: opacity, background image, colors, fonts and spacing."""

from typing import Any, Self

from kitty_rc.commands.base import AllMixin, CommandBuilder, MatchMixin, MatchTabMixin, MatchWindowMixin, StreamingPayloadMixin

FONT_SIZE_OPS = ('+', '-', '*', '/')
BACKGROUND_LAYOUTS = ('tiled', 'mirror-tiled', 'scaled', 'clamped', 'centered', 'cscaled', 'configured')


class SetBackgroundOpacityCommand(MatchWindowMixin, MatchTabMixin, AllMixin, CommandBuilder):
	verb = 'set-background-opacity'
	required = ('opacity',)

	def __init__(self, opacity: float):
		super().__init__()
		self._set('opacity', opacity)

	def toggle(self, value: bool = True) -> Self:
		return self._flag('toggle', value)

	def validate(self) -> None:
		opacity = self._parameters['opacity']
		if isinstance(opacity, bool) or not isinstance(opacity, (int, float)):
			raise self._invalid('opacity', 'must be a number')
		if not 0.0 <= opacity <= 1.0:
			raise self._invalid('opacity', 'must be between 0.0 and 1.0')


class SetBackgroundImageCommand(MatchMixin, AllMixin, StreamingPayloadMixin, CommandBuilder):
	"""Set the background image of OS windows.

	The image is PNG data, base64 encoded on the wire. Images are usually far
	larger than one chunk, so this is the command that exercises streaming::

		command = SetBackgroundImageCommand().from_path('wallpaper.png').layout('scaled').build()

	Pass the string ``'-'`` as data to remove the current image.
	"""

	verb = 'set-background-image'
	required = ('data',)

	def __init__(self, data: bytes | str | None = None):
		super().__init__()
		if data is not None:
			self.data(data)

	def layout(self, value: str) -> Self:
		return self._set('layout', value)

	def configured(self, value: bool = True) -> Self:
		return self._flag('configured', value)

	def validate(self) -> None:
		layout = self._parameters.get('layout')
		if layout is not None and layout not in BACKGROUND_LAYOUTS:
			raise self._invalid('layout', f'must be one of {", ".join(BACKGROUND_LAYOUTS)}')


class SetColorsCommand(MatchWindowMixin, MatchTabMixin, AllMixin, CommandBuilder):
	verb = 'set-colors'
	required = ('colors',)

	def __init__(self, colors: dict[str, Any]):
		super().__init__()
		self._set('colors', dict(colors))

	def configured(self, value: bool = True) -> Self:
		return self._flag('configured', value)

	def reset(self, value: bool = True) -> Self:
		return self._flag('reset', value)


class SetFontSizeCommand(AllMixin, CommandBuilder):
	"""Set the font size, absolutely or relative to the current size.

	``SetFontSizeCommand(14)`` sets 14pt, ``SetFontSizeCommand.increase(2)``
	grows the current size by 2pt. A size of 0 restores the configured size.
	"""

	verb = 'set-font-size'
	required = ('size',)

	def __init__(self, size: float, increment_op: str | None = None):
		super().__init__()
		self._set('size', size)
		if increment_op is not None:
			self._set('increment_op', increment_op)

	@classmethod
	def increase(cls, amount: float = 1) -> 'SetFontSizeCommand':
		return cls(amount, '+')

	@classmethod
	def decrease(cls, amount: float = 1) -> 'SetFontSizeCommand':
		return cls(amount, '-')

	def increment_op(self, op: str) -> Self:
		return self._set('increment_op', op)

	def validate(self) -> None:
		size = self._parameters['size']
		if isinstance(size, bool) or not isinstance(size, (int, float)):
			raise self._invalid('size', 'must be a number')
		op = self._parameters.get('increment_op')
		if op is None:
			if size < 0:
				raise self._invalid('size', 'an absolute size cannot be negative')
			return
		if op not in FONT_SIZE_OPS:
			raise self._invalid('increment_op', f'must be one of {" ".join(FONT_SIZE_OPS)}')
		if op == '/' and size == 0:
			raise self._invalid('size', 'cannot divide the font size by zero')


class SetSpacingCommand(MatchWindowMixin, MatchTabMixin, AllMixin, CommandBuilder):
	"""Set paddings and margins, e.g. ``{'padding-left': 10, 'margin': 0}``."""

	verb = 'set-spacing'
	required = ('settings',)

	def __init__(self, settings: dict[str, Any]):
		super().__init__()
		self._set('settings', dict(settings))

	def configured(self, value: bool = True) -> Self:
		return self._flag('configured', value)


class SetTabColorCommand(MatchMixin, CommandBuilder):
	verb = 'set-tab-color'
	required = ('colors',)

	def __init__(self, colors: dict[str, Any]):
		super().__init__()
		self._set('colors', dict(colors))


class GetColorsCommand(MatchMixin, CommandBuilder):
	verb = 'get-colors'

	def configured(self, value: bool = True) -> Self:
		return self._flag('configured', value)
