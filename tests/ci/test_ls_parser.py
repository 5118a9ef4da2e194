"""
Tests for decoding ls replies into the OS window / tab / window hierarchy.
"""

import json

import pytest

from kitty_rc.commands import LsCommand
from kitty_rc.exceptions import CommandFailedError, MalformedResponseError
from kitty_rc.protocol.views import Response
from kitty_rc.windows import find_focused_window, iter_windows, parse_ls_response


class TestParseLsResponse:
	"""Structure, ordering and forward compatibility."""

	def test_hierarchy_and_order(self, ls_data):
		instances = parse_ls_response(Response(ok=True, data=json.dumps(ls_data)))

		assert len(instances) == 1
		assert len(instances[0].tabs) == 1
		windows = instances[0].tabs[0].windows
		assert [window.id for window in windows] == [1, 2]
		assert windows[1].title == 'vim notes.md'
		assert windows[1].foreground_processes[0].name == 'vim'
		assert windows[0].shell == '/bin/zsh'
		assert instances[0].tabs[0].layout == 'tall'

	def test_data_may_be_decoded_already(self, ls_data):
		instances = parse_ls_response(Response(ok=True, data=ls_data))
		assert instances[0].id == 1

	def test_unknown_fields_are_kept(self, ls_data):
		instances = parse_ls_response(Response(ok=True, data=ls_data))
		assert instances[0].model_extra == {'future_os_field': 'kept'}
		assert instances[0].tabs[0].windows[1].model_extra == {'created_at': 1712345678}

	def test_ordering_is_not_sorted(self, ls_data):
		ls_data[0]['tabs'][0]['windows'].reverse()
		instances = parse_ls_response(Response(ok=True, data=ls_data))
		assert [window.id for window in instances[0].tabs[0].windows] == [2, 1]

	def test_ls_command_projection(self, ls_data):
		instances = LsCommand.parse_response(Response(ok=True, data=json.dumps(ls_data)))
		assert len(instances) == 1


class TestMalformedLs:
	"""Replies of the wrong shape raise MalformedResponseError."""

	def test_missing_tabs(self, ls_data):
		del ls_data[0]['tabs']
		with pytest.raises(MalformedResponseError):
			parse_ls_response(Response(ok=True, data=ls_data))

	def test_missing_windows(self, ls_data):
		del ls_data[0]['tabs'][0]['windows']
		with pytest.raises(MalformedResponseError):
			parse_ls_response(Response(ok=True, data=ls_data))

	def test_wrong_kind_for_known_field(self, ls_data):
		ls_data[0]['tabs'][0]['windows'][0]['id'] = '1'
		with pytest.raises(MalformedResponseError) as exc_info:
			parse_ls_response(Response(ok=True, data=ls_data))
		assert 'windows' in exc_info.value.message

	def test_opacity_as_text_is_rejected(self, ls_data):
		ls_data[0]['background_opacity'] = '0.5'
		with pytest.raises(MalformedResponseError):
			parse_ls_response(Response(ok=True, data=ls_data))

		ls_data[0]['background_opacity'] = 1
		assert parse_ls_response(Response(ok=True, data=ls_data))[0].background_opacity == 1

	@pytest.mark.parametrize('data', ['{not json', json.dumps({'tabs': []}), None, 42])
	def test_bad_top_level(self, data):
		with pytest.raises(MalformedResponseError):
			parse_ls_response(Response(ok=True, data=data))

	def test_failed_reply(self):
		with pytest.raises(CommandFailedError):
			parse_ls_response(Response(ok=False, error='Remote control is disabled'))


class TestWindowHelpers:
	"""Walking the hierarchy."""

	def test_iter_windows(self, ls_data):
		instances = parse_ls_response(Response(ok=True, data=ls_data))
		rows = list(iter_windows(instances))
		assert [(instance.id, tab.id, window.id) for instance, tab, window in rows] == [(1, 1, 1), (1, 1, 2)]

	def test_find_focused_window(self, ls_data):
		instances = parse_ls_response(Response(ok=True, data=ls_data))
		assert find_focused_window(instances).id == 2

	def test_falls_back_to_active_window(self, ls_data):
		ls_data[0]['tabs'][0]['windows'][1]['is_focused'] = False
		instances = parse_ls_response(Response(ok=True, data=ls_data))
		assert find_focused_window(instances).id == 2

	def test_no_focus(self, ls_data):
		ls_data[0]['is_focused'] = False
		ls_data[0]['is_active'] = False
		ls_data[0]['tabs'][0]['windows'][1]['is_focused'] = False
		instances = parse_ls_response(Response(ok=True, data=ls_data))
		assert find_focused_window(instances) is None
