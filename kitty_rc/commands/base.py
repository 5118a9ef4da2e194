"""Base builder shared by every remote control command."""

from pathlib import Path
from typing import Any, ClassVar, Self

from uuid_extensions import uuid7str

from kitty_rc.exceptions import InvalidValueError, MissingParameterError
from kitty_rc.protocol.views import DEFAULT_PROTOCOL_VERSION, Command


def _is_missing(value: Any) -> bool:
	if value is None:
		return True
	if isinstance(value, (str, bytes, list, tuple, dict)) and len(value) == 0:
		return True
	return False


class CommandBuilder:
	"""Accumulates the parameters of one command and validates them on build().

	Subclasses set ``verb`` and list their mandatory parameters in ``required``.
	Setters return the builder so calls can be chained in any order:

		command = SendTextCommand('text:ls\\n').match_spec('id:3').build()
	"""

	verb: ClassVar[str] = ''
	required: ClassVar[tuple[str, ...]] = ()
	# Wire parameters dropped when they still hold their default value
	defaults: ClassVar[dict[str, Any]] = {}

	def __init__(self) -> None:
		self._parameters: dict[str, Any] = {}
		self._payload: bytes | str | None = None
		self._async_token: str | None = None
		self._no_response = False
		self._kitty_window_id: str | None = None
		self._version = DEFAULT_PROTOCOL_VERSION

	def _set(self, name: str, value: Any) -> Self:
		self._parameters[name] = value
		return self

	def _flag(self, name: str, value: bool) -> Self:
		if value:
			self._parameters[name] = True
		else:
			self._parameters.pop(name, None)
		return self

	def _invalid(self, field: str, reason: str) -> InvalidValueError:
		return InvalidValueError(field, self.verb, reason)

	# Envelope options, available on every command

	def async_token(self, token: str | None = None) -> Self:
		"""Ask for an out-of-band completion tagged with ``token`` (generated when omitted)."""
		self._async_token = token or uuid7str()
		return self

	def no_response(self, value: bool = True) -> Self:
		self._no_response = value
		return self

	def kitty_window_id(self, window_id: int | str) -> Self:
		self._kitty_window_id = str(window_id)
		return self

	def version(self, major: int, minor: int, patch: int) -> Self:
		self._version = (major, minor, patch)
		return self

	def validate(self) -> None:
		"""Hook for range checks; raise InvalidValueError on bad input."""

	def _wire_parameters(self, parameters: dict[str, Any]) -> dict[str, Any]:
		"""Hook to turn validated values into their wire form. Gets a copy of the builder state."""
		return parameters

	def build(self) -> Command:
		for field in self.required:
			if field == 'data' and self._payload is not None and not _is_missing(self._payload):
				continue
			if _is_missing(self._parameters.get(field)):
				raise MissingParameterError(field, self.verb)
		self.validate()

		parameters = self._wire_parameters(
			{
				name: value
				for name, value in self._parameters.items()
				if value is not None and not (name in self.defaults and self.defaults[name] == value)
			}
		)
		return Command(
			verb=self.verb,
			parameters=parameters,
			payload=self._payload,
			async_token=self._async_token,
			version=self._version,
			no_response=self._no_response,
			kitty_window_id=self._kitty_window_id,
		)


class MatchMixin:
	"""Window selection through a match-spec such as ``id:3`` or ``title:vim``."""

	def match_spec(self, spec: str) -> Self:
		return self._set('match', spec)  # type: ignore[attr-defined]

	def self_window(self, value: bool = True) -> Self:
		return self._flag('self', value)  # type: ignore[attr-defined]


class MatchTabMixin:
	def match_tab(self, spec: str) -> Self:
		return self._set('match_tab', spec)  # type: ignore[attr-defined]


class MatchWindowMixin:
	"""Commands that name their window selector ``match_window`` on the wire."""

	def match_window(self, spec: str) -> Self:
		return self._set('match_window', spec)  # type: ignore[attr-defined]


class AllMixin:
	def all(self, value: bool = True) -> Self:
		return self._flag('all', value)  # type: ignore[attr-defined]


class StreamingPayloadMixin:
	"""Commands whose main argument is a (possibly large) blob sent as trailing data."""

	def data(self, blob: bytes | str) -> Self:
		self._payload = blob  # type: ignore[attr-defined]
		return self

	def from_path(self, path: str | Path) -> Self:
		"""Read the blob from a file now, so build() stays free of I/O."""
		return self.data(Path(path).read_bytes())
