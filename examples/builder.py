"""
Response Builder Example

Composes a response out of fragments: link headers contributed by partial
responses, and full responses where the last one replaces the previous.

Usage:
    python builder.py
    STITCH_LOG_LEVEL=debug python builder.py
"""

import asyncio

from stitch import PartialResponse, Response, ResponseBuilder


async def main() -> None:
	builder = ResponseBuilder(replaceSubsequentFullResponses=True)
	builder.withResponses(
		PartialResponse(headers={"Link": '<.acl>; rel="acl"'}),
		PartialResponse(headers={"Link": '<../>; rel="up"'}),
		Response(b"Hey! 1"),
		PartialResponse(headers={"Link": '<./next>; rel="next"'}),
		Response(b"Hey! 2"),
	)
	response = await builder.build()
	for name, value in response.headers.items():
		print(f"Header: {name}: {value}")
	print("Body:", await response.text())


if __name__ == "__main__":
	asyncio.run(main())

# EOF
