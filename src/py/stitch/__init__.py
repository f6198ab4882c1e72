from .http.errors import (  # NOQA: F401
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
from .http.headers import Headers, Guard  # NOQA: F401
from .http.sources import Blob, FormData, URLSearchParams  # NOQA: F401
from .http.body import (  # NOQA: F401
	Body,
	ignoreBodyUsed,
	asBuffer,
	asStream,
	asBestSuited,
)
from .http.message import Response, PartialResponse, Request  # NOQA: F401
from .http.builder import ResponseBuilder  # NOQA: F401
from .host import Capabilities, CAPABILITIES  # NOQA: F401

__version__ = "1.0.0"

# EOF
