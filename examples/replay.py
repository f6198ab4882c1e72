"""
Body Replay Example

Reads a file-backed stream body twice. The body ignores consumption, so the
file is read once and each read gets a replayed copy.

Usage:
    python replay.py [PATH]
"""

import asyncio
import sys
from pathlib import Path
from typing import AsyncIterator

from stitch import Body, asBuffer, ignoreBodyUsed


async def readFile(path: Path, size: int = 1024) -> AsyncIterator[bytes]:
	with open(path, "rb") as f:
		while chunk := f.read(size):
			yield chunk
			await asyncio.sleep(0)


async def main(path: Path) -> None:
	body = ignoreBodyUsed(Body(readFile(path)))
	first = await asBuffer(body)
	second = await asBuffer(body)
	print(f"Read {len(first or b'')} bytes, then {len(second or b'')} bytes")
	print("Identical:", first == second)


if __name__ == "__main__":
	asyncio.run(main(Path(sys.argv[1] if len(sys.argv) > 1 else __file__)))

# EOF
