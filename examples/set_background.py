"""Set a background image, streamed to kitty in 4 KiB chunks

To run:
    python examples/set_background.py ~/Pictures/wallpaper.png
"""

import asyncio
import os
import sys

from kitty_rc import ConnectionRegistry, KittyError
from kitty_rc.commands import SetBackgroundImageCommand
from kitty_rc.protocol import encode, into_chunks


async def main(path: str):
	pid = int(os.getenv('KITTY_PID', '0'))
	if not pid:
		print('❌ Please run this from inside kitty, or set KITTY_PID')
		return
	command = SetBackgroundImageCommand().from_path(path).layout('scaled').all().build()
	print(f'Sending {len(into_chunks(encode(command)))} chunks')

	async with ConnectionRegistry() as registry:
		try:
			response = await registry.execute_with_retry(pid, command)
			response.raise_for_error()
		except KittyError as e:
			print(f'❌ {e}')
			return
	print('✅ Background updated')


if __name__ == '__main__':
	if len(sys.argv) != 2:
		print(f'Usage: {sys.argv[0]} IMAGE.png')
		sys.exit(1)
	asyncio.run(main(sys.argv[1]))
