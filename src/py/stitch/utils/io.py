from ..config import DEFAULT_ENCODING

# NOTE: The legacy code-unit path expands each character to a 2-byte
# UTF-16 code unit, little endian, surrogates included.
CODE_UNIT_ENCODING: str = "utf-16-le"


def asBytes(value: str | bytes | bytearray | memoryview) -> bytes:
	"""Normalizes a chunk to immutable bytes, text is UTF-8 encoded."""
	if isinstance(value, bytes):
		return value
	elif isinstance(value, (bytearray, memoryview)):
		return bytes(value)
	elif isinstance(value, str):
		return value.encode(DEFAULT_ENCODING)
	else:
		raise TypeError(f"Expected bytes or str, got: {type(value).__name__}")


def asText(value: bytes) -> str:
	"""Decodes bytes as UTF-8, replacing invalid sequences."""
	return value.decode(DEFAULT_ENCODING, errors="replace")


def asCodeUnits(value: str) -> bytes:
	return value.encode(CODE_UNIT_ENCODING, errors="surrogatepass")


# EOF
