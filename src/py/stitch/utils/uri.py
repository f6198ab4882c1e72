from urllib.parse import quote, urljoin, urlsplit, urlunsplit
from .. import config

# Schemes for which an empty path is normalized to `/`
HIERARCHICAL_SCHEMES: frozenset[str] = frozenset(
	("http", "https", "ws", "wss", "ftp", "file")
)

# Ports that are dropped from the normalized URL
DEFAULT_PORTS: dict[str, int] = {
	"http": 80,
	"https": 443,
	"ws": 80,
	"wss": 443,
	"ftp": 21,
}

# Characters left as-is in paths, existing escapes included
PATH_SAFE: str = "/%:@!$&'()*+,;="


def absoluteURL(link: str, base: str | None = None) -> str:
	"""Resolves `link` against `base` and normalizes the result: scheme and
	host are lower-cased, default ports are dropped, the path is
	percent-encoded and an empty path becomes `/`."""
	res = urlsplit(urljoin(config.REDIRECT_BASE if base is None else base, link))
	if not res.scheme:
		raise ValueError(f"Could not resolve an absolute URL from: {link!r}")
	scheme: str = res.scheme.lower()
	netloc: str = res.netloc
	if res.hostname:
		# NOTE: We keep any user info as-is, only the host is case-insensitive
		userinfo, _, hostport = netloc.rpartition("@")
		hostport = hostport.lower()
		# `port` raises a `ValueError` when the port is malformed
		if res.port is not None and res.port == DEFAULT_PORTS.get(scheme):
			hostport = hostport.rpartition(":")[0]
		netloc = f"{userinfo}@{hostport}" if userinfo else hostport
	path: str = quote(res.path, safe=PATH_SAFE) or (
		"/" if scheme in HIERARCHICAL_SCHEMES else ""
	)
	return urlunsplit((scheme, netloc, path, res.query, res.fragment))


# EOF
