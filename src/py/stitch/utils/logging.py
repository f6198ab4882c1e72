import sys
import time
from contextvars import ContextVar
from enum import Enum
from typing import Any, NamedTuple, TypeAlias

from .. import config
from .term import Term

# --
# == Logging
#
# Structured log entries written as single coloured lines on stderr. The
# message is followed by its context, as `Key=value` pairs. Messages and
# bodies log at debug level, the host degrading a feature logs a warning.

TContext: TypeAlias = bool | int | float | str | bytes | None

# Set this in a task to tag the entries it logs
LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="stitch")


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40


LOG_LEVEL_COLOR: dict[LogLevel, int] = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
}


def parseLevel(name: str, default: LogLevel = LogLevel.Warning) -> LogLevel:
	"""Returns the level with the given case-insensitive name."""
	key: str = name.strip().lower()
	return next((_ for _ in LogLevel if _.name.lower() == key), default)


LOG_LEVEL: LogLevel = parseLevel(config.LOG_LEVEL)


class LogEntry(NamedTuple):
	origin: str
	time: float
	level: LogLevel
	message: str
	code: int | str | None = None
	context: dict[str, TContext] | None = None

	def format(self, color: bool = True) -> str:
		clr: str = Term.Color(LOG_LEVEL_COLOR[self.level]) if color else ""
		bold: str = Term.BOLD if color else ""
		reset: str = Term.RESET if color else ""
		code: str = f" [{self.code}]" if self.code is not None else ""
		data: str = formatContext(self.context, color)
		return f"{clr}{bold}[{self.origin}]{reset}{clr}{code} {self.message}{' ' if data else ''}{data}{reset}"


def formatValue(value: Any) -> str:
	if value is None:
		return "◌"
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	elif isinstance(value, bytes):
		return f"<{len(value)} bytes>"
	elif isinstance(value, str):
		return repr(value) if " " in value or not value else value
	else:
		return str(value)


def formatContext(context: dict[str, TContext] | None, color: bool = True) -> str:
	if not context:
		return ""
	bold: str = Term.BOLD if color else ""
	reset: str = Term.RESET if color else ""
	return " ".join(f"{bold}{k}{reset}={formatValue(v)}" for k, v in context.items())


def logged(level: LogLevel) -> bool:
	"""Tells if entries of the given level are output, so that callers can
	skip building expensive context."""
	return level.value >= LOG_LEVEL.value


def log(
	level: LogLevel,
	message: str,
	code: int | str | None = None,
	**context: TContext,
) -> LogEntry:
	"""Creates the entry and writes it out when its level is logged. The
	entry is returned either way."""
	res = LogEntry(
		origin=LogOrigin.get(),
		time=time.time(),
		level=level,
		message=message,
		code=code,
		context=context,
	)
	if logged(level):
		sys.stderr.write(res.format())
		sys.stderr.write("\n")
		sys.stderr.flush()
	return res


def debug(message: str, **context: TContext) -> LogEntry:
	return log(LogLevel.Debug, message, **context)


def info(message: str, **context: TContext) -> LogEntry:
	return log(LogLevel.Info, message, **context)


def warning(message: str, **context: TContext) -> LogEntry:
	return log(LogLevel.Warning, message, **context)


def error(message: str, code: int | str | None = None, **context: TContext) -> LogEntry:
	return log(LogLevel.Error, message, code, **context)


# EOF
