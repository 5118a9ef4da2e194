from typing import Self

from kitty_rc.commands.base import AllMixin, CommandBuilder, MatchMixin

KNOWN_LAYOUTS = ('fat', 'grid', 'horizontal', 'splits', 'stack', 'tall', 'vertical')


class GotoLayoutCommand(MatchMixin, CommandBuilder):
	verb = 'goto-layout'
	required = ('layout',)

	def __init__(self, layout: str):
		super().__init__()
		self._set('layout', layout)


class SetEnabledLayoutsCommand(MatchMixin, CommandBuilder):
	"""Restrict the layouts a tab cycles through.

	Layout names may carry options (``tall:bias=70``); only the name before the
	colon is checked against the known layouts.
	"""

	verb = 'set-enabled-layouts'
	required = ('layouts',)

	def __init__(self, layouts: list[str]):
		super().__init__()
		self._set('layouts', list(layouts))

	def configured(self, value: bool = True) -> Self:
		return self._flag('configured', value)

	def validate(self) -> None:
		for layout in self._parameters['layouts']:
			name = layout.partition(':')[0]
			if name not in KNOWN_LAYOUTS:
				raise self._invalid('layouts', f'unknown layout {name!r}')


class LastUsedLayoutCommand(MatchMixin, AllMixin, CommandBuilder):
	verb = 'last-used-layout'
