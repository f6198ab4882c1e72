import math
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any, ClassVar, Iterable, Iterator, TypeAlias, Union

from mypy_extensions import mypyc_attr

from .errors import HeaderGuardError, ValidationError

# --
# == Headers
#
# An ordered multi-map of header names to values. Names are stored
# lower-cased, values are kept in insertion order per name. Every name and
# value is validated before the collection is mutated.

# RFC 7230 `token`
HEADER_NAME: re.Pattern[str] = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
# Printable ASCII, extended ASCII and tab
HEADER_VALUE: re.Pattern[str] = re.compile(r"[\t\x20-\x7e\x80-\xff]*")

THeaderScalar: TypeAlias = str | int | float
THeadersInit: TypeAlias = Union[
	"Headers",
	Mapping[str, THeaderScalar | list[THeaderScalar] | tuple[THeaderScalar, ...]],
	Iterable[Any],
]


def isValidName(name: Any) -> bool:
	return isinstance(name, str) and bool(HEADER_NAME.fullmatch(name))


def isValidValue(value: Any) -> bool:
	return isinstance(value, str) and bool(HEADER_VALUE.fullmatch(value))


def headerValue(value: Any) -> str | None:
	"""Returns the string form of a header init leaf, or `None` when the
	leaf should be dropped."""
	# NOTE: `bool` is an `int`, but is not a number here
	if isinstance(value, bool):
		return None
	elif isinstance(value, str):
		return value
	elif isinstance(value, int):
		return str(value)
	elif isinstance(value, float):
		if math.isnan(value):
			return None
		elif value.is_integer():
			return str(int(value))
		else:
			return repr(value)
	else:
		return None


def headerPair(pair: Any) -> tuple[Any, Any]:
	item: tuple[Any, ...] | None = (
		tuple(pair)
		if isinstance(pair, Iterable) and not isinstance(pair, (str, bytes))
		else None
	)
	if item is None or len(item) != 2:
		raise ValidationError(
			f"Header init pairs must have exactly 2 elements, got: {pair!r}"
		)
	return item[0], item[1]


# -----------------------------------------------------------------------------
#
# GUARDS
#
# -----------------------------------------------------------------------------


class Guard(Enum):
	Unguarded = 0
	Immutable = 1
	Request = 2
	Response = 3


class GuardPolicy:
	"""Decides which mutations are allowed on a header collection. The
	default policy allows everything."""

	__slots__ = ["mode"]

	FORBIDDEN: ClassVar[frozenset[str]] = frozenset()

	def __init__(self, mode: Guard):
		self.mode: Guard = mode

	def allows(self, operation: str, name: str) -> bool:
		return name.lower() not in self.FORBIDDEN


class ImmutableGuardPolicy(GuardPolicy):
	def allows(self, operation: str, name: str) -> bool:
		return False


class RequestGuardPolicy(GuardPolicy):
	FORBIDDEN: ClassVar[frozenset[str]] = frozenset(
		(
			"accept-charset",
			"accept-encoding",
			"access-control-request-headers",
			"access-control-request-method",
			"connection",
			"content-length",
			"cookie",
			"cookie2",
			"date",
			"dnt",
			"expect",
			"host",
			"keep-alive",
			"origin",
			"referer",
			"te",
			"trailer",
			"transfer-encoding",
			"upgrade",
			"via",
		)
	)


class ResponseGuardPolicy(GuardPolicy):
	FORBIDDEN: ClassVar[frozenset[str]] = frozenset(("set-cookie", "set-cookie2"))


GUARD_POLICIES: dict[Guard, GuardPolicy] = {
	Guard.Unguarded: GuardPolicy(Guard.Unguarded),
	Guard.Immutable: ImmutableGuardPolicy(Guard.Immutable),
	Guard.Request: RequestGuardPolicy(Guard.Request),
	Guard.Response: ResponseGuardPolicy(Guard.Response),
}


# -----------------------------------------------------------------------------
#
# HEADERS
#
# -----------------------------------------------------------------------------


@mypyc_attr(allow_interpreted_subclasses=True)
class Headers:
	"""An ordered, case-insensitive multi-map of HTTP headers."""

	__slots__ = ["_headers", "_policy"]

	@staticmethod
	def Guarded(headers: THeadersInit | None, mode: Guard) -> "Headers":
		"""Creates a header collection from `headers` that only accepts the
		mutations allowed by the `mode` guard."""
		res = Headers(headers)
		res._policy = GUARD_POLICIES[mode]
		return res

	def __init__(self, headers: THeadersInit | None = None):
		self._headers: dict[str, list[str]] = {}
		self._policy: GuardPolicy = GUARD_POLICIES[Guard.Unguarded]
		if headers is not None:
			self._load(headers)

	@property
	def guard(self) -> Guard:
		return self._policy.mode

	def _load(self, headers: THeadersInit) -> None:
		if isinstance(headers, Headers):
			for name, value in headers.items():
				self.append(name, value)
		elif isinstance(headers, Mapping):
			for name, value in headers.items():
				if isinstance(value, (list, tuple)):
					for item in value:
						if (v := headerValue(item)) is not None:
							self.append(name, v)
				elif (v := headerValue(value)) is not None:
					self.set(name, v)
		elif isinstance(headers, (str, bytes)):
			raise ValidationError(
				f"Headers must be a mapping or name/value pairs, got: {headers!r}"
			)
		elif isinstance(headers, Iterable):
			for pair in headers:
				name, value = headerPair(pair)
				for leaf in value if isinstance(value, (list, tuple)) else (value,):
					if (v := headerValue(leaf)) is not None:
						self.append(name, v)
		else:
			raise ValidationError(
				f"Headers must be a mapping or name/value pairs, got: {type(headers).__name__}"
			)

	def _check(self, operation: str, name: str, value: str | None = None) -> str:
		"""Validates the mutation and returns the normalized name."""
		if not isValidName(name):
			raise ValidationError(f"Invalid header name: {name!r}")
		if operation != "delete" and not isValidValue(value):
			raise ValidationError(f"Invalid value for header {name!r}: {value!r}")
		if not self._policy.allows(operation, name):
			raise HeaderGuardError(
				f"Header {name!r} can't be changed ({operation}) on {self._policy.mode.name.lower()} headers",
				name,
			)
		return name.lower()

	# =========================================================================
	# API
	# =========================================================================

	def get(self, name: str) -> str | None:
		values = self._headers.get(name.lower())
		return values[0] if values else None

	def getAll(self, name: str) -> list[str]:
		return list(self._headers.get(name.lower(), ()))

	def has(self, name: str) -> bool:
		return name.lower() in self._headers

	def set(self, name: str, value: str) -> "Headers":
		self._headers[self._check("set", name, value)] = [value]
		return self

	def append(self, name: str, value: str) -> "Headers":
		key = self._check("append", name, value)
		if key in self._headers:
			self._headers[key].append(value)
		else:
			self._headers[key] = [value]
		return self

	def delete(self, name: str) -> "Headers":
		self._headers.pop(self._check("delete", name), None)
		return self

	def keys(self) -> Iterator[str]:
		yield from self._headers

	def values(self) -> Iterator[str]:
		for _, value in self.items():
			yield value

	def items(self) -> Iterator[tuple[str, str]]:
		"""Iterates on `(name, value)` pairs, yielding one pair per value."""
		for name, values in self._headers.items():
			for value in values:
				yield name, value

	def __iter__(self) -> Iterator[tuple[str, str]]:
		return self.items()

	def __contains__(self, name: object) -> bool:
		return isinstance(name, str) and self.has(name)

	def __len__(self) -> int:
		return len(self._headers)

	def __str__(self) -> str:
		return f"Headers({', '.join(f'{k}: {v}' for k, v in self.items())})"

	__repr__ = __str__


# EOF
