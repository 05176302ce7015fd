"""
Image fit math and image source decoding.
"""

# Standard Library
import asyncio
import base64
import binascii
import io
import logging
import urllib.parse

# PIP3 modules
import httpx
import PIL.Image

# local repo modules
import grid_pdf_designer as gpd
import grid_pdf_designer.config
import grid_pdf_designer.models


Rect = gpd.models.Rect

IMAGE_FETCH_TIMEOUT = gpd.config.IMAGE_FETCH_TIMEOUT

logger = logging.getLogger(__name__)


class ImageSourceError(Exception):
	"""Raised when an image source cannot be read or decoded."""


#============================================
def compute_fit_rect(
	image_ratio: float | None,
	container_width: float,
	container_height: float,
	fit: str | None,
) -> Rect:
	"""
	Compute where an image is drawn inside a container.

	The result is relative to the container's top-left corner. For cover
	the rectangle can extend past the container and must be clipped.

	Args:
		image_ratio: Image width / height, or None when unknown.
		container_width: Container width.
		container_height: Container height.
		fit: One of cover, contain, fill, stretch.

	Returns:
		Drawn rectangle.
	"""
	container = Rect(x=0.0, y=0.0, width=container_width, height=container_height)
	if image_ratio is None or image_ratio <= 0.0:
		return container
	if container_width <= 0.0 or container_height <= 0.0:
		return container
	container_ratio = container_width / container_height

	if fit == "contain":
		if image_ratio > container_ratio:
			height = container_width / image_ratio
			return Rect(x=0.0, y=(container_height - height) / 2.0, width=container_width, height=height)
		width = container_height * image_ratio
		return Rect(x=(container_width - width) / 2.0, y=0.0, width=width, height=container_height)

	if fit == "cover":
		if image_ratio > container_ratio:
			width = container_height * image_ratio
			return Rect(x=(container_width - width) / 2.0, y=0.0, width=width, height=container_height)
		height = container_width / image_ratio
		return Rect(x=0.0, y=(container_height - height) / 2.0, width=container_width, height=height)

	# fill, stretch and unknown modes use the container as-is
	return container


#============================================
def image_ratio(image: PIL.Image.Image | None) -> float | None:
	"""
	Args:
		image: Decoded image or None.

	Returns:
		Width / height, or None for a missing or empty image.
	"""
	if image is None:
		return None
	width, height = image.size
	if width <= 0 or height <= 0:
		return None
	return width / height


#============================================
def decode_data_uri(src: str) -> bytes:
	"""
	Decode the payload of a data URI.

	Args:
		src: URI like "data:image/png;base64,....".

	Returns:
		Raw bytes.
	"""
	header, separator, payload = src.partition(",")
	if not separator:
		raise ImageSourceError("Data URI has no payload")
	if header.endswith(";base64"):
		try:
			return base64.b64decode(payload, validate=False)
		except (binascii.Error, ValueError) as error:
			raise ImageSourceError(f"Invalid base64 payload: {error}") from error
	return urllib.parse.unquote_to_bytes(payload)


#============================================
def read_source_bytes(src: str) -> bytes:
	"""
	Read the bytes of an inline image source.

	Only data URIs are read; local paths and file URLs are rejected.

	Args:
		src: Image source.

	Returns:
		Raw bytes.
	"""
	if src.startswith("data:"):
		return decode_data_uri(src)
	scheme = urllib.parse.urlparse(src).scheme.lower() or "path"
	raise ImageSourceError(f"Unsupported image source ({scheme}): only data URIs and http(s) URLs are accepted")


#============================================
def decode_image_bytes(data: bytes) -> PIL.Image.Image:
	"""
	Decode image bytes with Pillow.

	Args:
		data: Encoded image.

	Returns:
		Loaded PIL image.
	"""
	try:
		image = PIL.Image.open(io.BytesIO(data))
		image.load()
	except (OSError, ValueError, PIL.Image.DecompressionBombError) as error:
		raise ImageSourceError(f"Cannot decode image: {error}") from error
	return image


#============================================
def decode_image_source(src: str) -> PIL.Image.Image:
	"""
	Decode an inline image source.

	Args:
		src: Data URI.

	Returns:
		Loaded PIL image.
	"""
	return decode_image_bytes(read_source_bytes(src))


#============================================
def is_remote_source(src: str) -> bool:
	scheme = urllib.parse.urlparse(src).scheme.lower()
	return scheme in ("http", "https")


#============================================
async def fetch_image_source(
	src: str,
	client: httpx.AsyncClient | None = None,
) -> PIL.Image.Image:
	"""
	Fetch and decode an image source without blocking the event loop.

	Args:
		src: Data URI or http(s) URL; URLs go through httpx.
		client: Shared async client for remote sources.

	Returns:
		Loaded PIL image.
	"""
	if not is_remote_source(src):
		return await asyncio.to_thread(decode_image_source, src)

	try:
		if client is None:
			async with httpx.AsyncClient(timeout=IMAGE_FETCH_TIMEOUT) as own_client:
				response = await own_client.get(src, follow_redirects=True)
		else:
			response = await client.get(src, follow_redirects=True)
		response.raise_for_status()
	except httpx.HTTPError as error:
		logger.warning("Image fetch failed for %s: %s", src, error)
		raise ImageSourceError(f"Cannot fetch image {src}: {error}") from error
	return await asyncio.to_thread(decode_image_bytes, response.content)
