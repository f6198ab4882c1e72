# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class MessageError(Exception):
	"""Base class for all the errors raised by messages, bodies and
	builders."""

	def __init__(self, message: str):
		super().__init__(message)
		self.message: str = message


class ValidationError(MessageError, ValueError):
	"""A header name or value, or any other input, is malformed."""


class HeaderGuardError(ValidationError):
	"""A mutation was rejected by the guard of a header collection."""

	def __init__(self, message: str, name: str | None = None):
		super().__init__(message)
		self.name: str | None = name


class StatusRangeError(ValidationError):
	"""A status code is outside of the accepted range."""

	def __init__(self, message: str, status: int):
		super().__init__(message)
		self.status: int = status


class ConsumptionError(MessageError):
	"""The body was already read and can't be read again."""


class CapabilityError(MessageError):
	"""The requested shape is not supported by the host."""

	def __init__(self, message: str, capability: str):
		super().__init__(message)
		self.capability: str = capability


class ConversionError(MessageError):
	"""The body representation could not be converted to the requested
	shape."""

	def __init__(self, message: str, shape: str):
		super().__init__(message)
		self.shape: str = shape


class ConfigurationError(MessageError):
	"""Builder options conflict, or the builder state does not allow an
	operation."""


class StateError(MessageError):
	"""A message was constructed in an invalid state."""


# EOF
