import asyncio
from array import array

import pytest

from stitch.host import Capabilities
from stitch.http.body import Body, asBestSuited, asBuffer, asStream, ignoreBodyUsed
from stitch.http.errors import CapabilityError, ConsumptionError, ConversionError
from stitch.http.sources import (
	Blob,
	FormData,
	SourceBuffer,
	SourceStream,
	SourceText,
	URLSearchParams,
)


class Counted:
	"""An async stream that counts how many chunks were pulled."""

	def __init__(self, *values: bytes):
		self.values = list(values)
		self.pulled = 0

	def __aiter__(self):
		return self

	async def __anext__(self) -> bytes:
		await asyncio.sleep(0)
		if not self.values:
			raise StopAsyncIteration
		self.pulled += 1
		return self.values.pop(0)


async def collect(stream) -> bytes:
	res = b""
	async for chunk in stream:
		res += chunk
	return res


# -----------------------------------------------------------------------------
# CONSUMPTION
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
	"value", ["text", b"bytes", Blob(b"blob"), array("B", b"array"), Counted(b"stream")]
)
def test_second_read_fails(value):
	async def main():
		body = Body(value)
		assert not body.bodyUsed
		await body.arrayBuffer()
		assert body.bodyUsed
		with pytest.raises(ConsumptionError):
			await body.arrayBuffer()
		with pytest.raises(ConsumptionError):
			await body.text()

	asyncio.run(main())


def test_ignore_body_used_allows_rereads():
	async def main():
		body = ignoreBodyUsed(Body("hello"))
		assert body.ignoresBodyUsed
		return await body.text(), await body.text(), await body.buffer(), body.bodyUsed

	assert asyncio.run(main()) == ("hello", "hello", b"hello", False)


def test_ignore_body_used_after_read_has_no_effect():
	async def main():
		body = Body("hello")
		await body.text()
		body.ignoreBodyUsed()
		assert not body.ignoresBodyUsed
		with pytest.raises(ConsumptionError):
			await body.text()

	asyncio.run(main())


def test_absent_body_reads_as_none():
	async def main():
		body = Body()
		assert not body.hasBody
		assert await body.text() is None
		assert await body.arrayBuffer() is None
		assert await body.stream() is None
		assert await body.bestSuited() is None
		assert not body.bodyUsed

	asyncio.run(main())


# -----------------------------------------------------------------------------
# STREAMS
# -----------------------------------------------------------------------------


def test_replayed_stream_reads_are_identical():
	async def main():
		source = Counted(b"a", b"b", b"c")
		body = Body(source).ignoreBodyUsed()
		first = await body.text()
		second = await body.arrayBuffer()
		third = await collect(await body.stream())
		return source.pulled, first, second, third

	assert asyncio.run(main()) == (3, "abc", b"abc", b"abc")


def test_concurrent_reads_share_replay_setup():
	async def main():
		source = Counted(b"x" * 10, b"y" * 10)
		body = Body(source).ignoreBodyUsed()
		results = await asyncio.gather(body.text(), body.text(), body.buffer())
		return source.pulled, results

	pulled, results = asyncio.run(main())
	assert pulled == 2
	assert results == ["x" * 10 + "y" * 10] * 2 + [b"x" * 10 + b"y" * 10]


def test_without_replay_stream_is_single_use(noReplay):
	async def main():
		body = Body(Counted(b"once"), capabilities=noReplay).ignoreBodyUsed()
		assert await body.text() == "once"
		assert body.bodyUsed
		with pytest.raises(ConsumptionError):
			await body.text()

	asyncio.run(main())


def test_without_replay_concurrent_reads_drain_once(noReplay):
	async def main():
		source = Counted(b"once")
		body = Body(source, capabilities=noReplay).ignoreBodyUsed()
		results = await asyncio.gather(body.text(), body.text(), return_exceptions=True)
		return source.pulled, results

	pulled, results = asyncio.run(main())
	assert pulled == 1
	assert "once" in results
	assert any(isinstance(_, ConsumptionError) for _ in results)


def test_live_stream_without_ignore():
	async def main():
		body = Body(iter([b"a", "b"]))
		stream = await body.stream()
		return await collect(stream), body.bodyUsed

	assert asyncio.run(main()) == (b"ab", True)


def test_stream_accessor_requires_stream_body():
	async def main():
		with pytest.raises(ConversionError):
			await Body("text").stream()

	asyncio.run(main())


# -----------------------------------------------------------------------------
# CONVERSIONS
# -----------------------------------------------------------------------------


def test_text_conversions():
	async def main():
		return (
			await Body("ab").arrayBuffer(),
			await Body("ab").blob(),
			await Body("é").buffer(),
			await Body("é").text(),
		)

	assert asyncio.run(main()) == (
		b"a\x00b\x00",
		Blob(b"ab"),
		"é".encode("utf8"),
		"é",
	)


def test_bytes_conversions():
	async def main():
		return (
			await Body("é".encode("utf8")).text(),
			await Body(b"\xff").text(),
			await Body(array("B", b"hi")).text(),
			await Body(array("B", b"hi")).buffer(),
			await Body(Blob(b"hi")).arrayBuffer(),
			await Body(memoryview(b"hi")).blob(),
		)

	assert asyncio.run(main()) == ("é", "�", "hi", b"hi", b"hi", Blob(b"hi"))


def test_json():
	async def main():
		assert await Body('{"a": [1, 2]}').json() == {"a": [1, 2]}
		assert await Body(b"true").json() is True
		with pytest.raises(ConversionError, match="Could not read body as JSON") as excinfo:
			await Body("{nope").json()
		assert excinfo.value.__cause__ is None
		assert excinfo.value.__suppress_context__

	asyncio.run(main())


def test_form_data():
	async def main():
		form = FormData({"a": "1"})
		assert await Body(form).formData() is form
		parsed = await Body("a=1+2&b=%3D").formData()
		assert list(parsed) == [("a", "1 2"), ("b", "=")]
		params = await Body(URLSearchParams({"q": "x y"})).formData()
		assert params.get("q") == "x y"
		with pytest.raises(ConversionError, match="FormData"):
			await Body("a=%zz").formData()

	asyncio.run(main())


async def interrupted():
	yield b'{"a":'
	await asyncio.sleep(0)
	raise OSError("Connection reset")


@pytest.mark.parametrize(
	"accessor,shape", [("json", "JSON"), ("formData", "FormData")]
)
def test_interrupted_stream_is_a_conversion_error(accessor, shape):
	async def main():
		body = Body(interrupted())
		with pytest.raises(ConversionError, match=f"Could not read body as {shape}") as excinfo:
			await getattr(body, accessor)()
		assert excinfo.value.__suppress_context__
		assert body.bodyUsed

	asyncio.run(main())


def test_reuse_is_not_a_conversion_error(noReplay):
	async def main():
		body = Body(Counted(b"{}"), capabilities=noReplay).ignoreBodyUsed()
		return await asyncio.gather(body.json(), body.formData(), return_exceptions=True)

	parsed, error = asyncio.run(main())
	assert parsed == {}
	assert isinstance(error, ConsumptionError)


@pytest.mark.parametrize(
	"accessor,shape",
	[
		("text", "text"),
		("blob", "Blob"),
		("arrayBuffer", "ArrayBuffer"),
		("buffer", "Buffer"),
		("json", "JSON"),
	],
)
def test_form_only_converts_to_form(accessor, shape):
	async def main():
		body = Body(FormData({"a": "1"}))
		with pytest.raises(ConversionError, match=f"Could not read body as {shape}"):
			await getattr(body, accessor)()
		# The failed read still used the body
		assert body.bodyUsed

	asyncio.run(main())


@pytest.mark.parametrize(
	"accessor,capability",
	[
		("blob", "blob"),
		("formData", "formData"),
		("arrayBuffer", "arrayBuffer"),
		("buffer", "buffer"),
		("stream", "streams"),
	],
)
def test_missing_capability(accessor, capability):
	async def main():
		capabilities = Capabilities()._replace(**{capability: False})
		body = Body(Counted(b"x"), capabilities=capabilities)
		with pytest.raises(CapabilityError) as excinfo:
			await getattr(body, accessor)()
		assert excinfo.value.capability == capability
		assert not body.bodyUsed
		# Other accessors are still available
		assert await body.text() == "x"

	asyncio.run(main())


def test_best_suited():
	async def main():
		assert await Body("x").bestSuited() == SourceText("x")
		assert await Body(b"x").bestSuited() == SourceBuffer(b"x")
		source = await Body(Counted(b"x")).bestSuited()
		assert isinstance(source, SourceStream)
		return await collect(source.stream)

	assert asyncio.run(main()) == b"x"


def test_body_value():
	form = FormData()
	blob = Blob(b"b")
	assert Body(b"x").body == b"x"
	assert Body(array("B", b"y")).body == b"y"
	assert Body(form).body is form
	assert Body(blob).body is blob
	assert Body("t").body == "t"
	assert Body(Counted(b"s")).body is None
	assert Body().body is None


# -----------------------------------------------------------------------------
# HEADERS
# -----------------------------------------------------------------------------


def test_content_type_inference():
	assert Body("x").headers.get("content-type") == "text/plain;charset=UTF-8"
	assert Body(Blob(b"{}", "application/json")).headers.get("content-type") == "application/json"
	assert (
		Body(URLSearchParams({"a": "1"})).headers.get("content-type")
		== "application/x-www-form-urlencoded;charset=UTF-8"
	)
	assert Body(Blob(b"{}")).headers.get("content-type") is None
	assert Body(b"x").headers.get("content-type") is None
	assert Body(FormData()).headers.get("content-type") is None
	assert Body().headers.get("content-type") is None


def test_explicit_content_type_wins():
	body = Body("x", {"Content-Type": "text/html"})
	assert body.headers.getAll("content-type") == ["text/html"]


# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------


def test_helpers():
	class Foreign:
		async def arrayBuffer(self):
			return bytearray(b"foreign")

	async def main():
		assert await asBuffer(Body("x")) == b"x"
		assert await asBuffer(Foreign()) == b"foreign"
		with pytest.raises(ConversionError):
			await asBuffer(object())
		with pytest.raises(ConversionError):
			await asStream("not a body")
		assert await collect(await asStream(Body(Counted(b"s")))) == b"s"
		assert await asBestSuited("x") == SourceText("x")
		assert await asBestSuited(Body(b"y")) == SourceBuffer(b"y")

	asyncio.run(main())


def test_body_from_body_shares_representation():
	async def main():
		original = Body(Counted(b"shared"))
		copy = Body(original)
		return await copy.text(), await original.text()

	assert asyncio.run(main()) == ("shared", "shared")


# EOF
