from typing import Any, TypeAlias, cast
import json as basejson


TJSON: TypeAlias = None | int | float | bool | str | list[Any] | dict[str, Any]


def unjson(value: bytes | str) -> TJSON:
	"""Parses a JSON-encoded value."""
	return cast(TJSON, basejson.loads(value))


# EOF
