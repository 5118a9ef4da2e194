from kitty_rc.commands import action
from kitty_rc.commands.action import ActionCommand
from kitty_rc.commands.base import CommandBuilder
from kitty_rc.commands.layout import GotoLayoutCommand, LastUsedLayoutCommand, SetEnabledLayoutsCommand
from kitty_rc.commands.process import (
	DisableLigaturesCommand,
	EnvCommand,
	KittenCommand,
	LaunchCommand,
	LoadConfigCommand,
	ResizeOsWindowCommand,
	RunCommand,
	SetUserVarsCommand,
	SignalChildCommand,
)
from kitty_rc.commands.style import (
	GetColorsCommand,
	SetBackgroundImageCommand,
	SetBackgroundOpacityCommand,
	SetColorsCommand,
	SetFontSizeCommand,
	SetSpacingCommand,
	SetTabColorCommand,
)
from kitty_rc.commands.tab import CloseTabCommand, DetachTabCommand, FocusTabCommand, SetTabTitleCommand
from kitty_rc.commands.window import (
	CloseWindowCommand,
	CreateMarkerCommand,
	DetachWindowCommand,
	FocusWindowCommand,
	GetTextCommand,
	LsCommand,
	NewWindowCommand,
	RemoveMarkerCommand,
	ResizeWindowCommand,
	ScrollWindowCommand,
	SelectWindowCommand,
	SendKeyCommand,
	SendTextCommand,
	SetWindowLogoCommand,
	SetWindowTitleCommand,
)

__all__ = [
	'action',
	'ActionCommand',
	'CommandBuilder',
	# window
	'CloseWindowCommand',
	'CreateMarkerCommand',
	'DetachWindowCommand',
	'FocusWindowCommand',
	'GetTextCommand',
	'LsCommand',
	'NewWindowCommand',
	'RemoveMarkerCommand',
	'ResizeWindowCommand',
	'ScrollWindowCommand',
	'SelectWindowCommand',
	'SendKeyCommand',
	'SendTextCommand',
	'SetWindowLogoCommand',
	'SetWindowTitleCommand',
	# tab
	'CloseTabCommand',
	'DetachTabCommand',
	'FocusTabCommand',
	'SetTabTitleCommand',
	# layout
	'GotoLayoutCommand',
	'LastUsedLayoutCommand',
	'SetEnabledLayoutsCommand',
	# process
	'DisableLigaturesCommand',
	'EnvCommand',
	'KittenCommand',
	'LaunchCommand',
	'LoadConfigCommand',
	'ResizeOsWindowCommand',
	'RunCommand',
	'SetUserVarsCommand',
	'SignalChildCommand',
	# style
	'GetColorsCommand',
	'SetBackgroundImageCommand',
	'SetBackgroundOpacityCommand',
	'SetColorsCommand',
	'SetFontSizeCommand',
	'SetSpacingCommand',
	'SetTabColorCommand',
]
