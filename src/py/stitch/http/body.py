import asyncio
from typing import Any, AsyncIterator

from mypy_extensions import mypyc_attr

from ..host import CAPABILITIES, Capabilities
from ..utils.io import asBytes, asCodeUnits, asText
from ..utils.json import TJSON, unjson
from ..utils.logging import debug
from .errors import CapabilityError, ConsumptionError, ConversionError
from .headers import Guard, Headers, THeadersInit
from .replay import SharedStream, StreamReplay, createReplay
from .sources import (
	Blob,
	FormData,
	SourceArrayBuffer,
	SourceBlob,
	SourceBuffer,
	SourceForm,
	SourceStream,
	SourceText,
	TByteSource,
	iterChunks,
	parseForm,
	readAll,
	resolve,
)

# -----------------------------------------------------------------------------
#
# BODY
#
# -----------------------------------------------------------------------------


@mypyc_attr(allow_interpreted_subclasses=True)
class Body:
	"""A message body that can be read once through any of its accessors.

	The body value is resolved to a single byte source representation at
	construction, the accessors convert it to the requested shape. Reading
	marks the body as used, unless `ignoreBodyUsed()` was called before, in
	which case the body can be read any number of times. Stream-backed
	bodies are then replayed: the live stream is drained once and each read
	gets its own copy."""

	__slots__ = [
		"headers",
		"capabilities",
		"_source",
		"_consumed",
		"_ignoreConsumption",
		"_replay",
	]

	def __init__(
		self,
		body: Any = None,
		headers: THeadersInit | None = None,
		*,
		capabilities: Capabilities | None = None,
	):
		self.capabilities: Capabilities = (
			CAPABILITIES if capabilities is None else capabilities
		)
		self._consumed: bool = False
		self._ignoreConsumption: bool = False
		self._replay: asyncio.Future[StreamReplay | None] | None = None
		self._source: TByteSource | None
		if isinstance(body, Body):
			self._source = body._share()
			self._consumed = body.bodyUsed
		else:
			self._source = resolve(body)
		# NOTE: Guarded headers are kept as-is so that the guard still applies
		self.headers: Headers = (
			headers
			if isinstance(headers, Headers) and headers.guard is not Guard.Unguarded
			else Headers(headers)
		)
		if (
			self._source is not None
			and self.headers.guard is not Guard.Immutable
			and not self.headers.has("content-type")
		):
			if isinstance(self._source, SourceText) and self._source.mediaType:
				self.headers.set("content-type", self._source.mediaType)
			elif isinstance(self._source, SourceBlob) and self._source.blob.type:
				self.headers.set("content-type", self._source.blob.type)

	@property
	def bodyUsed(self) -> bool:
		return self._consumed

	@property
	def ignoresBodyUsed(self) -> bool:
		return self._ignoreConsumption

	@property
	def hasBody(self) -> bool:
		return self._source is not None

	@property
	def body(self) -> bytes | FormData | Blob | str | None:
		"""The body value, or `None` when there is no body or the body is a
		stream, in which case it needs to be read through an accessor."""
		src = self._source
		if isinstance(src, SourceBuffer):
			return src.buffer
		elif isinstance(src, SourceArrayBuffer):
			return src.data
		elif isinstance(src, SourceForm):
			return src.form
		elif isinstance(src, SourceBlob):
			return src.blob
		elif isinstance(src, SourceText):
			return src.text
		else:
			return None

	def ignoreBodyUsed(self) -> "Body":
		"""Allows the body to be read more than once. This has no effect
		once the body has been used."""
		if self._consumed or self._ignoreConsumption:
			return self
		self._ignoreConsumption = True
		return self

	# =========================================================================
	# ACCESSORS
	# =========================================================================

	async def arrayBuffer(self) -> bytes | None:
		if self._source is None:
			return None
		self._begin("arrayBuffer")
		return await self._asArrayBuffer()

	async def blob(self) -> Blob | None:
		if self._source is None:
			return None
		self._begin("blob")
		src = self._source
		if isinstance(src, SourceBlob):
			return src.blob
		elif isinstance(src, SourceStream):
			return Blob(await self._readStream())
		elif isinstance(src, SourceBuffer):
			return Blob(src.buffer)
		elif isinstance(src, SourceArrayBuffer):
			return Blob(src.data)
		elif isinstance(src, SourceText):
			return Blob(asBytes(src.text))
		else:
			raise ConversionError("Could not read body as Blob", "blob")

	async def formData(self) -> FormData | None:
		if self._source is None:
			return None
		self._begin("formData")
		if isinstance(self._source, SourceForm):
			return self._source.form
		try:
			return parseForm(await self._asText())
		except ConsumptionError:
			raise
		except Exception:
			raise ConversionError("Could not read body as FormData", "formData") from None

	async def json(self) -> TJSON:
		if self._source is None:
			return None
		self._begin()
		try:
			return unjson(await self._asText())
		except ConsumptionError:
			raise
		except Exception:
			raise ConversionError("Could not read body as JSON", "json") from None

	async def text(self) -> str | None:
		if self._source is None:
			return None
		self._begin()
		return await self._asText()

	# =========================================================================
	# NON-STANDARD ACCESSORS
	# =========================================================================
	# These give access to the underlying representation, and are what the
	# response builder uses to move bodies around.

	async def buffer(self) -> bytes | None:
		"""Reads the body as raw bytes."""
		if self._source is None:
			return None
		self._begin("buffer")
		src = self._source
		if isinstance(src, SourceStream):
			return await self._readStream()
		elif isinstance(src, SourceBuffer):
			return src.buffer
		elif isinstance(src, SourceText):
			return asBytes(src.text)
		try:
			return await self._asArrayBuffer()
		except Exception:
			raise ConversionError("Could not read body as Buffer", "buffer") from None

	async def stream(self) -> AsyncIterator[bytes] | None:
		"""Returns the body stream. When the body ignores consumption, each
		call returns a new copy of the stream."""
		if self._source is None:
			return None
		self._begin("streams")
		if not isinstance(self._source, SourceStream):
			raise ConversionError("Could not read body as stream", "stream")
		return await self._openStream()

	async def bestSuited(self) -> TByteSource | None:
		"""Returns the representation of the body, streams being replaced by
		a readable copy when required."""
		if self._source is None:
			return None
		self._begin()
		if isinstance(self._source, SourceStream):
			return SourceStream(await self._openStream())
		return self._source

	# =========================================================================
	# INTERNALS
	# =========================================================================

	def _begin(self, capability: str | None = None) -> None:
		"""Checks that the body can be read and marks it as used, unless
		consumption is ignored."""
		if self._consumed:
			raise ConsumptionError("Body has already been read")
		if capability and not getattr(self.capabilities, capability):
			raise CapabilityError(f"Reading body as {capability} is not available", capability)
		if not self._ignoreConsumption:
			self._consumed = True

	async def _asArrayBuffer(self) -> bytes:
		src = self._source
		if isinstance(src, SourceStream):
			return await self._readStream()
		elif isinstance(src, SourceBuffer):
			return src.buffer
		elif isinstance(src, SourceArrayBuffer):
			return src.data
		elif isinstance(src, SourceText):
			return asCodeUnits(src.text)
		elif isinstance(src, SourceBlob):
			return src.blob.payload
		else:
			raise ConversionError("Could not read body as ArrayBuffer", "arrayBuffer")

	async def _asText(self) -> str:
		src = self._source
		if isinstance(src, SourceStream):
			return asText(await self._readStream())
		elif isinstance(src, SourceBuffer):
			return asText(src.buffer)
		elif isinstance(src, SourceBlob):
			return asText(src.blob.payload)
		elif isinstance(src, SourceArrayBuffer):
			return asText(src.data)
		elif isinstance(src, SourceText):
			return src.text
		else:
			raise ConversionError("Could not read body as text", "text")

	async def _readStream(self) -> bytes:
		return await readAll(await self._openStream())

	async def _openStream(self) -> AsyncIterator[bytes]:
		"""Returns a readable stream for a stream-backed body. The live
		stream is returned when the body is read once, otherwise the stream
		is replayed."""
		src = self._source
		assert isinstance(src, SourceStream)  # nosec: B101
		if not self._ignoreConsumption:
			return iterChunks(src.stream)
		elif self._replay is None:
			# Any concurrent read awaits this same future
			self._replay = asyncio.ensure_future(
				createReplay(src.stream, self.capabilities)
			)
			replay = await self._replay
			if replay:
				debug("Stream body replay established", Chunks=len(replay.chunks))
				return replay.copy()
			elif self._consumed:
				raise ConsumptionError("Body stream has already been read")
			else:
				# Without replay, the live stream can only be read once
				self._consumed = True
				return iterChunks(src.stream)
		else:
			replay = await self._replay
			if replay is None:
				raise ConsumptionError(
					"Body stream can't be replayed and has already been read"
				)
			return replay.copy()

	async def _replayedCopy(self) -> AsyncIterator[bytes]:
		assert self._replay is not None  # nosec: B101
		replay = await self._replay
		if replay is None:
			raise ConsumptionError("Body stream can't be replayed and has already been read")
		async for chunk in replay.copy():
			yield chunk

	def _share(self) -> TByteSource | None:
		"""Returns a representation that another body can own. Streams are
		teed so that both bodies can read them independently, or shared for a
		single read when the host can't replay them."""
		src = self._source
		if not isinstance(src, SourceStream):
			return src
		elif not self.capabilities.replay:
			# Both bodies hold the live stream, only one of them can read it
			shared = SharedStream(src.stream)
			self._source = SourceStream(shared.read())
			return SourceStream(shared.read())
		elif self._replay is not None:
			return SourceStream(self._replayedCopy())
		else:
			replay = StreamReplay(src.stream)
			self._source = SourceStream(replay.copy())
			return SourceStream(replay.copy())


# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def ignoreBodyUsed(body: Body) -> Body:
	return body.ignoreBodyUsed()


async def asBuffer(body: Any) -> bytes | None:
	"""Reads the body as bytes, using the most direct accessor available."""
	if isinstance(body, Body):
		return await body.buffer()
	elif callable(getattr(body, "arrayBuffer", None)):
		res = await body.arrayBuffer()
		return None if res is None else bytes(res)
	else:
		raise ConversionError("Could not read body as Buffer", "buffer")


async def asStream(body: Any) -> AsyncIterator[bytes] | None:
	# We only support streams when the body already knows how to produce one
	if isinstance(body, Body):
		return await body.stream()
	else:
		raise ConversionError("Could not read body as stream", "stream")


async def asBestSuited(body: Any) -> TByteSource | None:
	if isinstance(body, Body):
		return await body.bestSuited()
	else:
		return resolve(body)


# EOF
