"""
In-memory image store that hands out data URLs for image elements.
"""

# Standard Library
import base64
import dataclasses
import datetime
import re
import time
import urllib.parse
import uuid


VALID_IMAGE_URL = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)
SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


@dataclasses.dataclass
class StoredImage:
	id: str
	name: str
	data_url: str
	size: int
	type: str
	upload_date: datetime.datetime


@dataclasses.dataclass
class StorageStats:
	total_count: int
	total_size: int
	formatted_size: str


#============================================
def build_data_url(data: bytes, mime_type: str) -> str:
	"""
	Encode raw image bytes as a base64 data URL.

	Args:
		data: Image bytes.
		mime_type: MIME type like "image/png".

	Returns:
		Data URL string.
	"""
	encoded = base64.b64encode(data).decode("ascii")
	return f"data:{mime_type};base64,{encoded}"


#============================================
def format_file_size(size: int) -> str:
	"""
	Format a byte count for display.

	Args:
		size: Number of bytes.

	Returns:
		String like "1.5 KB".
	"""
	if size <= 0:
		return "0 Bytes"
	index = 0
	value = float(size)
	while value >= 1024 and index < len(SIZE_UNITS) - 1:
		value /= 1024
		index += 1
	value = round(value, 2)
	return f"{value:g} {SIZE_UNITS[index]}"


#============================================
def is_valid_image_url(url: str) -> bool:
	"""
	Check that a string is an absolute URL ending in an image extension.

	Args:
		url: Candidate URL.

	Returns:
		True if the URL looks like a fetchable image.
	"""
	parsed = urllib.parse.urlparse(url)
	if not parsed.scheme or not parsed.netloc:
		return False
	return VALID_IMAGE_URL.search(parsed.path) is not None


class ImageStore:
	"""
	Keeps uploaded images as data URLs keyed by id.
	"""

	def __init__(self):
		self._images: list[StoredImage] = []

	def store_image(self, name: str, data: bytes, mime_type: str) -> StoredImage:
		image = StoredImage(
			id=f"img-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}",
			name=name,
			data_url=build_data_url(data, mime_type),
			size=len(data),
			type=mime_type,
			upload_date=datetime.datetime.now(),
		)
		self._images.append(image)
		return image

	def remove_image(self, image_id: str) -> None:
		self._images = [image for image in self._images if image.id != image_id]

	def get_image(self, image_id: str) -> StoredImage | None:
		for image in self._images:
			if image.id == image_id:
				return image
		return None

	def all_images(self) -> list[StoredImage]:
		return list(self._images)

	def clear(self) -> None:
		self._images = []

	def storage_stats(self) -> StorageStats:
		total_size = sum(image.size for image in self._images)
		return StorageStats(
			total_count=len(self._images),
			total_size=total_size,
			formatted_size=format_file_size(total_size),
		)
