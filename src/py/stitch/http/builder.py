from typing import Any, Callable, Iterable, NamedTuple, TypeAlias

from ..utils.logging import debug, warning
from .errors import ConfigurationError, ConsumptionError, MessageError
from .headers import Headers, THeadersInit
from .message import PartialResponse, Response
from .sources import SourceStream, TByteSource

# --
# == Response builder
#
# Composes an ordered list of response fragments into a single response.
# There can be at most one full response, which is authoritative for the
# body and status. Without a full response, the last partial response with a
# non-empty body provides both the body and status. Headers of every
# fragment are merged in order.

THeaderProcessor: TypeAlias = Callable[[Headers], THeadersInit | None]

# Headers describing the body itself
ENTITY_HEADERS: tuple[str, ...] = (
	"content-type",
	"content-length",
	"content-encoding",
	"content-disposition",
	"content-language",
	"content-location",
)


class BuilderOptions(NamedTuple):
	ignoreSubsequentFullResponses: bool = False
	replaceSubsequentFullResponses: bool = False
	disableReadableCheck: bool = False
	headerPostProcess: THeaderProcessor | None = None
	useSetForEntityHeaders: bool = False
	entityHeaders: tuple[str, ...] = ENTITY_HEADERS


def isEmpty(body: Any) -> bool:
	return body is None or (
		isinstance(body, (str, bytes, bytearray)) and len(body) == 0
	)


class ResponseBuilder:
	"""Merges response fragments (partial responses, and at most one full
	response) into a single response."""

	__slots__ = ["options", "_fragments", "_hasFullResponse", "_response", "_dirty"]

	def __init__(
		self,
		*,
		ignoreSubsequentFullResponses: bool = False,
		replaceSubsequentFullResponses: bool = False,
		disableReadableCheck: bool = False,
		headerPostProcess: THeaderProcessor | None = None,
		useSetForEntityHeaders: bool = False,
		entityHeaders: Iterable[str] | None = None,
	):
		if ignoreSubsequentFullResponses and replaceSubsequentFullResponses:
			raise ConfigurationError(
				"ResponseBuilder only accepts ignoreSubsequentFullResponses or replaceSubsequentFullResponses, not both"
			)
		self.options: BuilderOptions = BuilderOptions(
			ignoreSubsequentFullResponses=ignoreSubsequentFullResponses,
			replaceSubsequentFullResponses=replaceSubsequentFullResponses,
			disableReadableCheck=disableReadableCheck,
			headerPostProcess=headerPostProcess,
			useSetForEntityHeaders=useSetForEntityHeaders,
			entityHeaders=ENTITY_HEADERS
			if entityHeaders is None
			else tuple(_.lower() for _ in entityHeaders),
		)
		self._fragments: list[Response | None] = []
		self._hasFullResponse: bool = False
		self._response: Response | None = None
		self._dirty: bool = False

	@property
	def responses(self) -> tuple[Response | None, ...]:
		"""The registered fragments, `None` marking a gap."""
		return tuple(self._fragments)

	def withHeaders(self, *headers: THeadersInit | None) -> "ResponseBuilder":
		"""Registers one bodiless partial response per headers value."""
		return self.withResponses(
			*(PartialResponse(None, headers=Headers(_)) for _ in headers if _ is not None)
		)

	def withResponses(self, *responses: Response | None) -> "ResponseBuilder":
		"""Registers the given fragments in order. A `None` fragment is kept
		as a gap."""
		for response in responses:
			self._withResponse(response)
		return self

	def _withResponse(self, response: Response | None) -> None:
		if response is None:
			# A gap has no effect on the build, the cache stays valid
			self._fragments.append(None)
			return
		if not response.partial:
			if self._hasFullResponse and self.options.ignoreSubsequentFullResponses:
				debug("Ignored subsequent full response", Status=response.status)
				return
			elif self._hasFullResponse and self.options.replaceSubsequentFullResponses:
				# The superseded full response goes, along with everything
				# that was registered before it.
				i: int = next(
					i
					for i, _ in enumerate(self._fragments)
					if _ is not None and not _.partial
				)
				debug(
					"Replaced full response",
					Status=response.status,
					Dropped=i + 1,
				)
				self._fragments = self._fragments[i + 1 :]
			elif self._hasFullResponse:
				raise ConfigurationError(
					"ResponseBuilder already contains a full response, and subsequent full responses are not acceptable"
				)
			else:
				self._hasFullResponse = True
		self._dirty = True
		self._fragments.append(response)

	def clear(self) -> "ResponseBuilder":
		"""Removes all the fragments, keeping the options. Fragments can be
		reordered with `responses`, `clear()` and `withResponses()`."""
		self._fragments = []
		self._hasFullResponse = False
		self._response = None
		self._dirty = False
		return self

	async def build(self) -> Response:
		"""Merges the fragments into a new response. The result is cached
		until the fragments change."""
		if not self._dirty and self._response is not None:
			return self._response
		response = await self._join([_ for _ in self._fragments if _ is not None])
		self._response = response
		self._dirty = False
		return response

	async def _join(self, responses: list[Response]) -> Response:
		options = self.options
		body: Any = None
		status: int | None = None
		statusText: str | None = None

		full: Response | None = next((_ for _ in responses if not _.partial), None)
		if full is not None:
			if full.bodyUsed:
				warning("Full response body was already used", Status=full.status)
				raise ConsumptionError("Provided full response but the body was already used")
			status = full.status
			statusText = full.statusText
			# Streams are handed over, other representations are shared
			source: TByteSource | None = full._source
			body = await full.bestSuited() if isinstance(source, SourceStream) else source

		headers = Headers()
		for response in responses:
			for name, value in response.headers.items():
				if options.useSetForEntityHeaders and name in options.entityHeaders:
					headers.set(name, value)
				else:
					headers.append(name, value)

			if full is not None or response.bodyUsed:
				continue

			current: Any = response.body
			if isEmpty(current) and not options.disableReadableCheck:
				try:
					current = await response.stream()
				except MessageError:
					# Not a stream, the fragment has no body to contribute
					current = None

			if isEmpty(current):
				continue
			body = current
			# The status comes with the body
			if isinstance(response.status, int):
				status = response.status
				statusText = response.statusText

		if options.headerPostProcess:
			processed = options.headerPostProcess(headers)
			if processed is not None:
				headers = processed if isinstance(processed, Headers) else Headers(processed)

		debug(
			"Built response",
			Fragments=len(responses),
			Full=full is not None,
			Status=status,
		)
		return Response(body, headers=headers, status=status, statusText=statusText)


# EOF
