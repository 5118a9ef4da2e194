"""Command-line client for kitty remote control.

Usage:
	kitty-rc ls
	kitty-rc --pid 12345 active
	kitty-rc goto 3
	kitty-rc --socket /tmp/kitty.sock status
	kitty-rc font +2
"""

import argparse
import asyncio
import json
import os
import sys
from typing import Any

from kitty_rc.commands.style import SetFontSizeCommand
from kitty_rc.commands.window import FocusWindowCommand, LsCommand
from kitty_rc.config import RegistryConfig
from kitty_rc.exceptions import CommandFailedError, InvalidValueError, KittyError
from kitty_rc.logging_config import setup_logging
from kitty_rc.registry.service import ConnectionRegistry
from kitty_rc.utils import default_socket_path, pid_from_socket_path
from kitty_rc.windows.service import find_focused_window, iter_windows, parse_ls_response
from kitty_rc.windows.views import OsInstance, WindowInfo


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog='kitty-rc',
		description='Control a running kitty terminal over its remote control socket',
		formatter_class=argparse.RawDescriptionHelpFormatter,
		epilog="""
Examples:
  kitty-rc ls                      # List OS windows, tabs and windows
  kitty-rc active                  # Show the focused window
  kitty-rc goto 3                  # Focus window 3
  kitty-rc status                  # Check that the instance answers
  kitty-rc font +2                 # Grow the font by 2pt (-2 shrinks, 12 sets)
""",
	)

	target = parser.add_mutually_exclusive_group()
	target.add_argument('--pid', type=int, help='kitty process id (default: $KITTY_PID)')
	target.add_argument('--socket', help='Socket path (default: $KITTY_LISTEN_ON or derived from the pid)')
	parser.add_argument('--json', action='store_true', help='Output as JSON')
	parser.add_argument('--timeout', type=float, help='Connect and command timeout in seconds')
	parser.add_argument('--log-level', help='Logging level (default: $KITTY_RC_LOGGING_LEVEL or warning)')

	subparsers = parser.add_subparsers(dest='command', help='Command to execute')

	subparsers.add_parser('ls', aliases=['list'], help='List windows')
	subparsers.add_parser('active', help='Show the focused window')

	p = subparsers.add_parser('goto', help='Focus a window by id')
	p.add_argument('window_id', type=int, help='Window id as shown by ls')

	subparsers.add_parser('status', help='Show the connection status of the instance')

	p = subparsers.add_parser('font', help='Set the font size')
	p.add_argument('size', help='Absolute size (12) or a relative change (+2, -1)')

	return parser


def resolve_target(args: argparse.Namespace) -> tuple[int, str]:
	"""Work out the instance id and socket path from flags and the environment."""
	if args.socket:
		return pid_from_socket_path(args.socket) or 0, args.socket
	if args.pid is not None:
		return args.pid, default_socket_path(args.pid)

	listen_on = os.environ.get('KITTY_LISTEN_ON', '')
	if listen_on.startswith('unix:') and not listen_on.startswith('unix:@'):
		path = listen_on.removeprefix('unix:')
		return pid_from_socket_path(path) or int(os.environ.get('KITTY_PID', '0') or 0), path

	kitty_pid = os.environ.get('KITTY_PID')
	if kitty_pid and kitty_pid.isdigit():
		pid = int(kitty_pid)
		return pid, default_socket_path(pid)

	raise KittyError('No kitty instance given: use --pid or --socket, or run inside kitty')


def font_size_command(value: str) -> SetFontSizeCommand:
	try:
		size = float(value)
	except ValueError:
		raise InvalidValueError('size', 'set-font-size', f'{value!r} is not a number') from None
	if value.startswith('+'):
		return SetFontSizeCommand.increase(size)
	if value.startswith('-'):
		return SetFontSizeCommand.decrease(-size)
	return SetFontSizeCommand(size)


def _window_summary(window: WindowInfo) -> dict[str, Any]:
	return {
		'id': window.id,
		'title': window.title,
		'pid': window.pid,
		'cwd': window.cwd,
		'is_focused': window.is_focused,
		'foreground_processes': [process.model_dump() for process in window.foreground_processes],
	}


def _print_windows(instances: list[OsInstance]) -> None:
	print(f'OS windows: {len(instances)}')
	for instance in instances:
		print(f'OS window {instance.id}{" (focused)" if instance.is_focused else ""}')
		for tab in instance.tabs:
			print(f'  Tab {tab.id}: {tab.title}{" [" + tab.layout + "]" if tab.layout else ""}')
			for window in tab.windows:
				marker = '*' if window.is_focused else ' '
				print(f'   {marker} Window {window.id}: {window.title}')
				if window.cwd:
					print(f'       cwd: {window.cwd}')
				for process in window.foreground_processes:
					print(f'       process: {process.name} (pid {process.pid})')


async def run(args: argparse.Namespace) -> int:
	target, socket_path = resolve_target(args)
	overrides = {'connect_timeout': args.timeout} if args.timeout else {}
	config = RegistryConfig.from_env(**overrides)

	async with ConnectionRegistry(config, socket_resolver=lambda _: socket_path) as registry:
		if args.command == 'status':
			status = await registry.check_status(target)
			if args.json:
				print(json.dumps({'target': target, 'socket': socket_path, **status.model_dump(mode='json')}))
			else:
				print(f'kitty {target} at {socket_path}: {status}')
			return 0 if status.is_ready else 1

		if args.command in ('ls', 'list', 'active'):
			response = await registry.execute_with_retry(target, LsCommand().build())
			assert response is not None
			instances = parse_ls_response(response)
			if args.command == 'active':
				window = find_focused_window(instances)
				if window is None:
					raise KittyError('No focused window', target=target, verb='ls')
				if args.json:
					print(json.dumps(_window_summary(window)))
				else:
					print(f'Window {window.id}: {window.title}')
					if window.cwd:
						print(f'  cwd: {window.cwd}')
				return 0
			if args.json:
				print(json.dumps([instance.model_dump(mode='json') for instance in instances]))
			else:
				_print_windows(instances)
				print(f'Total windows: {sum(1 for _ in iter_windows(instances))}')
			return 0

		if args.command == 'goto':
			command = FocusWindowCommand().match_spec(f'id:{args.window_id}').build()
		elif args.command == 'font':
			command = font_size_command(args.size).build()
		else:
			raise KittyError(f'Unknown command: {args.command}')

		response = await registry.execute_with_retry(target, command)
		assert response is not None
		response.raise_for_error(target=target, verb=command.verb)
		if args.json:
			print(json.dumps({'ok': True, 'data': response.data}))
		return 0


def main() -> int:
	"""Main entry point."""
	parser = build_parser()
	args = parser.parse_args()

	if not args.command:
		parser.print_help()
		return 0

	setup_logging(args.log_level)
	try:
		return asyncio.run(run(args))
	except CommandFailedError as e:
		print(f'Error: {e}', file=sys.stderr)
		if e.traceback:
			print(e.traceback, file=sys.stderr)
		return 1
	except KittyError as e:
		print(f'Error: {e}', file=sys.stderr)
		return 1
	except KeyboardInterrupt:
		return 130


if __name__ == '__main__':
	sys.exit(main())
