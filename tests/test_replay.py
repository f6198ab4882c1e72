import asyncio

import pytest

from stitch.host import Capabilities
from stitch.http.replay import StreamReplay, createReplay


class Counted:
	"""An async stream that counts how many chunks were pulled."""

	def __init__(self, *values: bytes, error: Exception | None = None):
		self.values = list(values)
		self.error = error
		self.pulled = 0

	def __aiter__(self):
		return self

	async def __anext__(self) -> bytes:
		await asyncio.sleep(0)
		if self.values:
			self.pulled += 1
			return self.values.pop(0)
		elif self.error:
			raise self.error
		else:
			raise StopAsyncIteration


async def collect(stream) -> bytes:
	res = b""
	async for chunk in stream:
		res += chunk
	return res


def test_copies_observe_the_same_bytes():
	async def main():
		source = Counted(b"one ", b"two ", b"three")
		replay = await StreamReplay.Create(source)
		assert source.pulled == 1
		first = await collect(replay.copy())
		second = await collect(replay.copy())
		return source, first, second, replay

	source, first, second, replay = asyncio.run(main())
	assert first == second == b"one two three"
	assert source.pulled == 3
	assert replay.copies == 2


def test_concurrent_copies_drain_once():
	async def main():
		source = Counted(*(bytes([_]) for _ in range(20)))
		replay = StreamReplay(source)
		results = await asyncio.gather(*(collect(replay.copy()) for _ in range(4)))
		return source, results

	source, results = asyncio.run(main())
	assert source.pulled == 20
	assert all(_ == bytes(range(20)) for _ in results)


def test_errors_are_replayed():
	async def main():
		replay = StreamReplay(Counted(b"partial", error=RuntimeError("broken")))
		for _ in range(2):
			received = []
			with pytest.raises(RuntimeError, match="broken"):
				async for chunk in replay.copy():
					received.append(chunk)
			assert received == [b"partial"]

	asyncio.run(main())


def test_load():
	async def main():
		replay = StreamReplay(iter([b"a", "b"]))
		return await replay.load(), await replay.load()

	assert asyncio.run(main()) == (b"ab", b"ab")


def test_create_replay_requires_capability():
	async def main():
		source = Counted(b"x")
		assert await createReplay(source, Capabilities(replay=False)) is None
		assert source.pulled == 0
		replay = await createReplay(source, Capabilities())
		assert replay is not None
		return await replay.load()

	assert asyncio.run(main()) == b"x"


# EOF
