import asyncio
from typing import AsyncIterator

from ..host import Capabilities
from ..utils.logging import warning
from .errors import ConsumptionError
from .sources import TByteStream, iterChunks

# --
# == Stream replay
#
# A stream can only be drained once. The replay pulls every chunk from the
# live stream exactly once, records it, and hands out any number of copies
# that each yield the full sequence of chunks from the start. Copies read
# ahead of the recording pull the next chunk from the live stream, pulls are
# serialized so that two copies never drain the source concurrently.


class StreamReplay:
	"""Single producer, multiple consumers duplication of a byte stream."""

	__slots__ = ["source", "chunks", "ended", "error", "lock", "copies"]

	@staticmethod
	async def Create(stream: TByteStream) -> "StreamReplay":
		"""Attaches a replay to the stream and starts draining it."""
		replay = StreamReplay(stream)
		await replay.pull(0)
		return replay

	def __init__(self, stream: TByteStream):
		self.source: AsyncIterator[bytes] = iterChunks(stream)
		self.chunks: list[bytes] = []
		self.ended: bool = False
		self.error: Exception | None = None
		self.lock: asyncio.Lock = asyncio.Lock()
		self.copies: int = 0

	async def pull(self, index: int) -> None:
		"""Ensures the chunk at `index` is recorded, unless the stream has
		ended."""
		async with self.lock:
			# Another copy may have pulled while we were waiting
			if index < len(self.chunks) or self.ended:
				return
			try:
				self.chunks.append(await anext(self.source))
			except StopAsyncIteration:
				self.ended = True
			except Exception as e:
				# The error is replayed to every copy once its chunks are read
				self.error = e
				self.ended = True

	async def copy(self) -> AsyncIterator[bytes]:
		"""Yields every chunk of the stream, from the start."""
		self.copies += 1
		i: int = 0
		while True:
			if i < len(self.chunks):
				yield self.chunks[i]
				i += 1
			elif self.ended:
				if self.error is not None:
					raise self.error
				return
			else:
				await self.pull(i)

	async def load(self) -> bytes:
		"""Drains a copy in a single bytes value."""
		res = bytearray()
		async for chunk in self.copy():
			res += chunk
		return bytes(res)

	def __str__(self) -> str:
		return f"StreamReplay(chunks={len(self.chunks)}, ended={self.ended}, copies={self.copies})"


class SharedStream:
	"""A live stream held by more than one body, when it can't be replayed.
	The first reader gets the stream, any other reader fails."""

	__slots__ = ["source", "taken"]

	def __init__(self, stream: TByteStream):
		self.source: TByteStream = stream
		self.taken: bool = False

	async def read(self) -> AsyncIterator[bytes]:
		if self.taken:
			raise ConsumptionError("Body stream is shared and has already been read")
		self.taken = True
		async for chunk in iterChunks(self.source):
			yield chunk


async def createReplay(
	stream: TByteStream, capabilities: Capabilities
) -> StreamReplay | None:
	"""Creates a replay for the given stream, or returns `None` when the host
	can't duplicate streams."""
	if not capabilities.replay:
		warning("Stream replay is not available, the body can only be read once")
		return None
	return await StreamReplay.Create(stream)


# EOF
