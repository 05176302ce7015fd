import asyncio
import base64
import io
import pathlib

import httpx
import PIL.Image
import pytest

import grid_pdf_designer.image_fit as image_fit


#============================================
def png_bytes(width: int, height: int, color: tuple[int, int, int] = (255, 0, 0)) -> bytes:
	"""
	Encode a solid PNG image.
	"""
	buffer = io.BytesIO()
	PIL.Image.new("RGB", (width, height), color).save(buffer, format="PNG")
	return buffer.getvalue()


#============================================
def data_uri(data: bytes) -> str:
	return "data:image/png;base64," + base64.b64encode(data).decode("ascii")


#============================================
def as_tuple(rect) -> tuple[float, float, float, float]:
	return (rect.x, rect.y, rect.width, rect.height)


#============================================
def test_contain_matching_ratio_fills_container() -> None:
	"""
	Same aspect ratio under contain gives the container exactly.
	"""
	rect = image_fit.compute_fit_rect(2.0, 100.0, 50.0, "contain")
	assert as_tuple(rect) == (0.0, 0.0, 100.0, 50.0)


#============================================
def test_contain_letterboxes() -> None:
	assert as_tuple(image_fit.compute_fit_rect(2.0, 100.0, 100.0, "contain")) == (0.0, 25.0, 100.0, 50.0)
	assert as_tuple(image_fit.compute_fit_rect(0.5, 100.0, 100.0, "contain")) == (25.0, 0.0, 50.0, 100.0)


#============================================
def test_cover_overflows_and_centers() -> None:
	"""
	Cover scales to fill the container, overflowing the long axis.
	"""
	assert as_tuple(image_fit.compute_fit_rect(2.0, 100.0, 100.0, "cover")) == (-50.0, 0.0, 200.0, 100.0)
	assert as_tuple(image_fit.compute_fit_rect(0.5, 100.0, 100.0, "cover")) == (0.0, -50.0, 100.0, 200.0)


#============================================
def test_fill_stretch_and_unknown_ratio_use_container() -> None:
	for fit in ("fill", "stretch"):
		assert as_tuple(image_fit.compute_fit_rect(3.0, 80.0, 40.0, fit)) == (0.0, 0.0, 80.0, 40.0)
	assert as_tuple(image_fit.compute_fit_rect(None, 80.0, 40.0, "cover")) == (0.0, 0.0, 80.0, 40.0)
	assert as_tuple(image_fit.compute_fit_rect(0.0, 80.0, 40.0, "contain")) == (0.0, 0.0, 80.0, 40.0)


#============================================
def test_decode_data_uri_and_ratio() -> None:
	image = image_fit.decode_image_source(data_uri(png_bytes(40, 20)))
	assert image.size == (40, 20)
	assert image_fit.image_ratio(image) == 2.0
	assert image_fit.image_ratio(None) is None


#============================================
def test_local_sources_are_rejected(tmp_path: pathlib.Path) -> None:
	"""
	Existing files are not read, whether given as a path or a file URL.
	"""
	path = tmp_path / "photo.png"
	path.write_bytes(png_bytes(10, 30))
	for src in (str(path), path.as_uri(), "ftp://images.test/photo.png"):
		with pytest.raises(image_fit.ImageSourceError, match="Unsupported image source"):
			image_fit.decode_image_source(src)
		with pytest.raises(image_fit.ImageSourceError):
			asyncio.run(image_fit.fetch_image_source(src))


#============================================
def test_decode_failures_raise_image_source_error(tmp_path: pathlib.Path) -> None:
	"""
	Corrupt payloads and missing files raise ImageSourceError.
	"""
	for src in (
		"data:image/png;base64,AAAA",
		"data:image/png;base64",
		str(tmp_path / "missing.png"),
	):
		with pytest.raises(image_fit.ImageSourceError):
			image_fit.decode_image_source(src)


#============================================
def test_fetch_remote_source_with_client() -> None:
	"""
	Remote sources go through the httpx client.
	"""
	payload = png_bytes(30, 10)

	def handler(request: httpx.Request) -> httpx.Response:
		if request.url.path == "/ok.png":
			return httpx.Response(200, content=payload)
		return httpx.Response(404)

	async def run() -> tuple:
		transport = httpx.MockTransport(handler)
		async with httpx.AsyncClient(transport=transport) as client:
			image = await image_fit.fetch_image_source("https://images.test/ok.png", client)
			with pytest.raises(image_fit.ImageSourceError):
				await image_fit.fetch_image_source("https://images.test/missing.png", client)
		return image.size

	assert asyncio.run(run()) == (30, 10)


#============================================
def test_fetch_data_uri_without_client() -> None:
	image = asyncio.run(image_fit.fetch_image_source(data_uri(png_bytes(5, 5))))
	assert image.size == (5, 5)
