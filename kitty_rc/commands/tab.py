from typing import Self

from kitty_rc.commands.base import CommandBuilder, MatchMixin


class FocusTabCommand(MatchMixin, CommandBuilder):
	verb = 'focus-tab'


class SetTabTitleCommand(MatchMixin, CommandBuilder):
	verb = 'set-tab-title'
	required = ('title',)

	def __init__(self, title: str):
		super().__init__()
		self._set('title', title)


class CloseTabCommand(MatchMixin, CommandBuilder):
	verb = 'close-tab'

	def ignore_no_match(self, value: bool = True) -> Self:
		return self._flag('ignore_no_match', value)


class DetachTabCommand(MatchMixin, CommandBuilder):
	"""Move a tab into another OS window (a new one unless target_tab is set)."""

	verb = 'detach-tab'

	def target_tab(self, spec: str) -> Self:
		return self._set('target_tab', spec)
