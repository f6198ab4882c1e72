from typing import NamedTuple
from . import config


class Capabilities(NamedTuple):
	"""The host capabilities gating which body representations and
	accessors are available."""

	streams: bool = True
	blob: bool = True
	formData: bool = True
	buffer: bool = True
	arrayBuffer: bool = True
	# Whether a stream can be duplicated to be read more than once
	replay: bool = True

	@staticmethod
	def Probe() -> "Capabilities":
		return Capabilities(
			streams=not config.NO_STREAMS,
			blob=not config.NO_BLOB,
			formData=not config.NO_FORMDATA,
			buffer=not config.NO_BUFFER,
			arrayBuffer=not config.NO_ARRAYBUFFER,
			replay=not config.NO_REPLAY,
		)


# Probed once, fixed for the lifetime of the process.
CAPABILITIES: Capabilities = Capabilities.Probe()

# EOF
