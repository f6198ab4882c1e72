from os import getenv

DEFAULT_ENCODING: str = "utf8"

# Minimum level for `stitch.utils.logging`, one of debug, info, warning,
# error.
LOG_LEVEL: str = getenv("STITCH_LOG_LEVEL", "warning").lower()

# Host capabilities can be switched off to emulate a more limited runtime,
# they are probed once by `stitch.host`.
NO_STREAMS: bool = getenv("STITCH_NO_STREAMS", "0") == "1"
NO_BLOB: bool = getenv("STITCH_NO_BLOB", "0") == "1"
NO_FORMDATA: bool = getenv("STITCH_NO_FORMDATA", "0") == "1"
NO_BUFFER: bool = getenv("STITCH_NO_BUFFER", "0") == "1"
NO_ARRAYBUFFER: bool = getenv("STITCH_NO_ARRAYBUFFER", "0") == "1"
NO_REPLAY: bool = getenv("STITCH_NO_REPLAY", "0") == "1"

# Relative redirect locations are resolved against this base.
REDIRECT_BASE: str = getenv("STITCH_REDIRECT_BASE", "https://fetch.spec.whatwg.org/")

# EOF
