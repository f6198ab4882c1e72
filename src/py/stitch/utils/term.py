import os
from typing import ClassVar

# SEE: https://no-color.org/
NO_COLOR: bool = "NO_COLOR" in os.environ
COLOR: bool = "FORCE_COLOR" in os.environ or not NO_COLOR


class Term:
	"""ANSI sequences for the log lines, empty when colours are off."""

	BOLD: ClassVar[str] = "\033[1m" if COLOR else ""
	RESET: ClassVar[str] = "\033[0m" if COLOR else ""

	@staticmethod
	def Color(color: int) -> str:
		return f"\033[38;5;{color}m" if COLOR else ""


# EOF
