"""List every window of a running kitty instance

Start kitty with remote control enabled and a socket per instance:

    kitty -o allow_remote_control=yes -o listen_on=unix:${XDG_RUNTIME_DIR}/kitty-{kitty_pid}.sock

To run (from a shell inside that kitty, which sets KITTY_PID):
    python examples/list_windows.py
"""

import asyncio
import os

from kitty_rc import ConnectionRegistry, RegistryConfig, parse_ls_response, setup_logging
from kitty_rc.commands import LsCommand
from kitty_rc.windows import iter_windows


async def main():
	pid = os.getenv('KITTY_PID')
	if not pid:
		print('❌ Please run this from inside kitty, or set KITTY_PID')
		return

	setup_logging('info')
	async with ConnectionRegistry(RegistryConfig.from_env()) as registry:
		response = await registry.execute_with_retry(int(pid), LsCommand().build(), timeout=10)
		instances = parse_ls_response(response)

	for instance, tab, window in iter_windows(instances):
		focused = ' (focused)' if window.is_focused else ''
		print(f'OS window {instance.id} / tab {tab.id} "{tab.title}" / window {window.id}: {window.title}{focused}')
		for process in window.foreground_processes:
			print(f'    {process.pid}: {" ".join(process.cmdline)}')


if __name__ == '__main__':
	asyncio.run(main())
