from typing import Any, ClassVar, Literal, TypeAlias

from ..host import Capabilities
from ..utils.uri import absoluteURL
from .body import Body
from .errors import StateError, StatusRangeError, ValidationError
from .headers import Guard, Headers, THeadersInit

TResponseType: TypeAlias = Literal["default", "error"]

# Statuses for which a response can't have a body
NULL_BODY_STATUSES: frozenset[int] = frozenset((101, 204, 205, 304))
REDIRECT_STATUSES: frozenset[int] = frozenset((301, 302, 303, 307, 308))


def hasContent(body: Any) -> bool:
	"""Tells if the given body value is non-empty."""
	if body is None:
		return False
	elif isinstance(body, (str, bytes, bytearray)):
		return len(body) > 0
	elif isinstance(body, Body):
		return body.hasBody
	else:
		return True


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class Response(Body):
	"""An HTTP response, with a status, headers and a body."""

	__slots__ = ["_status", "_statusText", "_redirected", "_type"]

	# Only partial responses can be merged with a full response
	partial: ClassVar[bool] = False

	@staticmethod
	def Error() -> "Response":
		"""Returns a network error response, with immutable empty headers."""
		res = Response(None, headers=Headers.Guarded(None, Guard.Immutable))
		res._type = "error"
		return res

	@staticmethod
	def Redirect(url: str, status: int = 302) -> "Response":
		"""Returns a redirect response to the absolute form of `url`."""
		if status not in REDIRECT_STATUSES:
			raise StatusRangeError(f"Invalid redirect status: {status}", status)
		try:
			location = absoluteURL(url)
		except ValueError as e:
			raise ValidationError(f"Invalid redirect URL: {url!r}") from e
		res = Response(
			None,
			status=status,
			headers=Headers.Guarded({"Location": location}, Guard.Immutable),
		)
		res._redirected = True
		return res

	def __init__(
		self,
		body: Any = None,
		*,
		status: int | None = None,
		statusText: str | None = None,
		headers: THeadersInit | None = None,
		capabilities: Capabilities | None = None,
	):
		effective: int = status or 200
		if effective in NULL_BODY_STATUSES and hasContent(body):
			raise StateError(f"Response with null body status {effective} can't have a body")
		super().__init__(body, headers, capabilities=capabilities)
		self._status: int | None = effective
		self._statusText: str | None = statusText
		self._redirected: bool = False
		self._type: TResponseType = "default"

	@property
	def status(self) -> int | None:
		return self._status

	@property
	def statusText(self) -> str | None:
		return self._statusText

	@property
	def ok(self) -> bool:
		return self._status is not None and 200 <= self._status < 300

	@property
	def redirected(self) -> bool:
		return self._redirected

	@property
	def type(self) -> TResponseType:
		return self._type

	def clone(self) -> "Response":
		"""Returns a copy of this response. A body that was already read
		can't be read from the copy either."""
		res = type(self)(
			self,
			status=self._status,
			statusText=self._statusText,
			headers=self.headers,
			capabilities=self.capabilities,
		)
		res._redirected = self._redirected
		res._type = self._type
		return res

	def __str__(self) -> str:
		return f"{self.__class__.__name__}({self._status} {self._statusText or ''} {self.headers} {self._source})"


class PartialResponse(Response):
	"""A fragment of a response, to be merged by a `ResponseBuilder`. Its
	status is `None` unless given, and its body can be read any number of
	times."""

	__slots__: list[str] = []

	partial: ClassVar[bool] = True

	def __init__(
		self,
		body: Any = None,
		*,
		status: int | None = None,
		statusText: str | None = None,
		headers: THeadersInit | None = None,
		capabilities: Capabilities | None = None,
	):
		super().__init__(
			body,
			status=status,
			statusText=statusText,
			headers=headers,
			capabilities=capabilities,
		)
		# The response defaults to 200, a partial has no opinion
		if not isinstance(status, int) or isinstance(status, bool):
			self._status = None
		self.ignoreBodyUsed()


# -----------------------------------------------------------------------------
#
# REQUEST
#
# -----------------------------------------------------------------------------


class Request(Body):
	"""An HTTP request. When created from another request, its url, headers
	and body are inherited unless given."""

	__slots__ = ["_method", "_url"]

	def __init__(
		self,
		input: "str | Request",
		*,
		method: str | None = None,
		headers: THeadersInit | None = None,
		body: Any = None,
		capabilities: Capabilities | None = None,
	):
		parent: Request | None = input if isinstance(input, Request) else None
		super().__init__(
			body if body is not None else parent,
			headers if headers is not None else (parent.headers if parent else None),
			capabilities=capabilities
			if capabilities is not None
			else (parent.capabilities if parent else None),
		)
		self._url: str = parent.url if parent else str(input)
		self._method: str = method or "GET"

	@property
	def method(self) -> str:
		return self._method

	@property
	def url(self) -> str:
		return self._url

	def clone(self) -> "Request":
		return Request(self, method=self._method)

	def __str__(self) -> str:
		return f"Request({self._method} {self._url} {self.headers})"


# EOF
