from .errors import (  # NOQA: F401
	MessageError,
	ValidationError,
	HeaderGuardError,
	StatusRangeError,
	ConsumptionError,
	CapabilityError,
	ConversionError,
	ConfigurationError,
	StateError,
)
from .headers import Headers, Guard  # NOQA: F401
from .sources import Blob, FormData, URLSearchParams, resolve  # NOQA: F401
from .body import Body, ignoreBodyUsed, asBuffer, asStream, asBestSuited  # NOQA: F401
from .message import Response, PartialResponse, Request  # NOQA: F401
from .builder import ResponseBuilder, BuilderOptions  # NOQA: F401

# EOF
