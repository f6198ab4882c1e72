import inspect
import re
from array import array
from collections.abc import AsyncIterable, Iterator, Mapping
from typing import Any, AsyncIterator, Iterable, NamedTuple, TypeAlias, Union
from urllib.parse import parse_qsl, unquote, urlencode

from ..utils.io import asBytes

TEXT_MEDIA_TYPE: str = "text/plain;charset=UTF-8"
FORM_MEDIA_TYPE: str = "application/x-www-form-urlencoded;charset=UTF-8"

# Size of the chunks pulled from readers exposing `read(size)`
STREAM_CHUNK_SIZE: int = 64_000

# A `%` that does not start a valid escape
INVALID_ESCAPE: re.Pattern[str] = re.compile(r"%(?![0-9A-Fa-f]{2})")

# -----------------------------------------------------------------------------
#
# VALUES
#
# -----------------------------------------------------------------------------


class Blob(NamedTuple):
	"""An immutable binary payload with an optional media type."""

	payload: bytes = b""
	type: str = ""

	@staticmethod
	def FromBytes(data: bytes | bytearray | memoryview, type: str = "") -> "Blob":
		return Blob(bytes(data), type)

	@property
	def size(self) -> int:
		return len(self.payload)


TFieldValue: TypeAlias = Union[str, Blob]


class Fields:
	"""An ordered list of name/value pairs where names may repeat."""

	__slots__ = ["_fields"]

	def __init__(
		self,
		fields: Mapping[str, TFieldValue] | Iterable[tuple[str, TFieldValue]] | None = None,
	):
		self._fields: list[tuple[str, TFieldValue]] = []
		if isinstance(fields, Mapping):
			for name, value in fields.items():
				self.append(name, value)
		elif fields is not None:
			for name, value in fields:
				self.append(name, value)

	def append(self, name: str, value: TFieldValue) -> None:
		self._fields.append((name, value))

	def set(self, name: str, value: TFieldValue) -> None:
		"""Replaces the first field named `name` and removes the others,
		appending it when absent."""
		res: list[tuple[str, TFieldValue]] = []
		found: bool = False
		for k, v in self._fields:
			if k != name:
				res.append((k, v))
			elif not found:
				res.append((k, value))
				found = True
		if not found:
			res.append((name, value))
		self._fields = res

	def get(self, name: str) -> TFieldValue | None:
		for k, v in self._fields:
			if k == name:
				return v
		return None

	def getAll(self, name: str) -> list[TFieldValue]:
		return [v for k, v in self._fields if k == name]

	def has(self, name: str) -> bool:
		return any(k == name for k, _ in self._fields)

	def delete(self, name: str) -> None:
		self._fields = [(k, v) for k, v in self._fields if k != name]

	def items(self) -> Iterator[tuple[str, TFieldValue]]:
		return iter(list(self._fields))

	def __iter__(self) -> Iterator[tuple[str, TFieldValue]]:
		return self.items()

	def __len__(self) -> int:
		return len(self._fields)

	def __eq__(self, other: object) -> bool:
		return type(other) is type(self) and self._fields == getattr(other, "_fields")

	def __str__(self) -> str:
		return f"{self.__class__.__name__}({self._fields})"

	__repr__ = __str__


class FormData(Fields):
	"""A multipart form value."""


class URLSearchParams(Fields):
	"""URL-encoded parameters, which can be parsed from a query string and
	serialize back to `application/x-www-form-urlencoded` text."""

	def __init__(
		self,
		fields: str
		| Mapping[str, TFieldValue]
		| Iterable[tuple[str, TFieldValue]]
		| None = None,
	):
		if isinstance(fields, str):
			super().__init__(
				parse_qsl(fields[1:] if fields.startswith("?") else fields, keep_blank_values=True)
			)
		else:
			super().__init__(fields)

	def __str__(self) -> str:
		return urlencode([(k, v if isinstance(v, str) else "") for k, v in self._fields])


def parseForm(text: str) -> FormData:
	"""Parses `&`/`=` delimited, percent-encoded pairs where `+` stands for
	a space. Raises `ValueError` on malformed escapes."""
	form = FormData()
	for part in text.strip().split("&"):
		if not part:
			continue
		name, _, value = part.partition("=")
		form.append(decodeComponent(name), decodeComponent(value))
	return form


def decodeComponent(text: str) -> str:
	text = text.replace("+", " ")
	if INVALID_ESCAPE.search(text):
		raise ValueError(f"Malformed percent-encoding: {text!r}")
	return unquote(text, errors="strict")


# -----------------------------------------------------------------------------
#
# STREAMS
#
# -----------------------------------------------------------------------------

# A push-style byte stream: an async iterable, a (sync) iterator/generator or
# a reader with an async `read(size)` like `asyncio.StreamReader`.
TByteStream: TypeAlias = Any


def isStream(value: Any) -> bool:
	return (
		isinstance(value, AsyncIterable)
		or (isinstance(value, Iterator) and not isinstance(value, (str, bytes)))
		or inspect.iscoroutinefunction(getattr(value, "read", None))
	)


async def iterChunks(stream: TByteStream) -> AsyncIterator[bytes]:
	"""Iterates on the chunks of the given stream as bytes."""
	if isinstance(stream, AsyncIterable):
		async for chunk in stream:
			yield asBytes(chunk)
	elif isinstance(stream, Iterator):
		for chunk in stream:
			yield asBytes(chunk)
	else:
		while chunk := await stream.read(STREAM_CHUNK_SIZE):
			yield asBytes(chunk)


async def readAll(stream: TByteStream) -> bytes:
	"""Drains the stream in a single bytes value."""
	res = bytearray()
	async for chunk in iterChunks(stream):
		res += chunk
	return bytes(res)


# -----------------------------------------------------------------------------
#
# REPRESENTATIONS
#
# -----------------------------------------------------------------------------


class SourceText(NamedTuple):
	text: str
	mediaType: str | None = TEXT_MEDIA_TYPE


class SourceBlob(NamedTuple):
	blob: Blob


class SourceForm(NamedTuple):
	form: FormData


class SourceBuffer(NamedTuple):
	buffer: bytes


class SourceArrayBuffer(NamedTuple):
	data: bytes


class SourceStream(NamedTuple):
	stream: TByteStream


# The byte source representations, exactly one per body
TByteSource: TypeAlias = (
	SourceText | SourceBlob | SourceForm | SourceBuffer | SourceArrayBuffer | SourceStream
)

BYTE_SOURCES: tuple[type, ...] = (
	SourceText,
	SourceBlob,
	SourceForm,
	SourceBuffer,
	SourceArrayBuffer,
	SourceStream,
)


def asBufferView(value: Any) -> memoryview | None:
	"""Returns a byte view on objects supporting the buffer protocol."""
	try:
		return memoryview(value).cast("B")
	except TypeError:
		return None


def resolve(value: Any) -> TByteSource | None:
	"""Resolves an arbitrary body value to its byte source representation,
	the first matching rule wins."""
	if value is None:
		return None
	elif isinstance(value, BYTE_SOURCES):
		return value
	elif isinstance(value, str):
		return SourceText(value)
	elif (inner := getattr(value, "body", None)) is not None:
		return resolve(inner)
	elif isStream(value):
		return SourceStream(value)
	elif isinstance(value, (bytes, bytearray)):
		return SourceBuffer(bytes(value))
	elif isinstance(value, Blob):
		return SourceBlob(value)
	elif isinstance(value, FormData):
		return SourceForm(value)
	elif isinstance(value, URLSearchParams):
		return SourceText(str(value), FORM_MEDIA_TYPE)
	elif isinstance(value, memoryview):
		return SourceBlob(Blob(value.tobytes()))
	elif isinstance(value, array):
		return SourceArrayBuffer(value.tobytes())
	elif (view := asBufferView(value)) is not None:
		return SourceArrayBuffer(view.tobytes())
	else:
		return SourceText(str(value))


# EOF
