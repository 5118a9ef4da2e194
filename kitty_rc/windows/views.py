"""Typed snapshot of the window hierarchy returned by ``ls``.

Known fields are strictly typed so a reply of the wrong shape is rejected, not
coerced. Fields added by newer terminal versions are kept as model extras.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr


class _Snapshot(BaseModel):
	model_config = ConfigDict(frozen=True, extra='allow')


class ProcessInfo(_Snapshot):
	"""A foreground process of a window."""

	pid: StrictInt | None = None
	cmdline: list[StrictStr] = Field(default_factory=list)
	cwd: StrictStr | None = None

	@property
	def name(self) -> str | None:
		return self.cmdline[0] if self.cmdline else None


class WindowInfo(_Snapshot):
	id: StrictInt
	title: StrictStr = ''
	pid: StrictInt | None = None
	cwd: StrictStr | None = None
	cmdline: list[StrictStr] = Field(default_factory=list)
	env: dict[str, StrictStr] = Field(default_factory=dict)
	user_vars: dict[str, StrictStr] = Field(default_factory=dict)
	foreground_processes: list[ProcessInfo] = Field(default_factory=list)
	is_focused: StrictBool = False
	is_active: StrictBool = False
	is_self: StrictBool = False
	at_prompt: StrictBool = False
	lines: StrictInt | None = None
	columns: StrictInt | None = None

	@property
	def shell(self) -> str | None:
		return self.cmdline[0] if self.cmdline else None


class TabInfo(_Snapshot):
	id: StrictInt
	title: StrictStr = ''
	layout: StrictStr | None = None
	layout_state: dict[str, Any] = Field(default_factory=dict)
	enabled_layouts: list[StrictStr] = Field(default_factory=list)
	active_window_history: list[StrictInt] = Field(default_factory=list)
	is_focused: StrictBool = False
	is_active: StrictBool = False
	windows: list[WindowInfo]


class OsInstance(_Snapshot):
	"""One OS-level window of a kitty instance, with its tabs in on-screen order."""

	id: StrictInt
	platform_window_id: StrictInt | None = None
	is_focused: StrictBool = False
	is_active: StrictBool = False
	last_focused: StrictBool = False
	wm_class: StrictStr | None = None
	wm_name: StrictStr | None = None
	background_opacity: StrictFloat | StrictInt | None = None
	tabs: list[TabInfo]
