"""
Physical length conversion.
"""

# Standard Library
import re

# local repo modules
import grid_pdf_designer as gpd
import grid_pdf_designer.config


POINTS_PER_MM = gpd.config.POINTS_PER_MM
POINTS_PER_CM = gpd.config.POINTS_PER_CM
POINTS_PER_PX = gpd.config.POINTS_PER_PX
FALLBACK_PAGE_POINTS = gpd.config.FALLBACK_PAGE_POINTS

UNIT_FACTORS = {
	"mm": POINTS_PER_MM,
	"cm": POINTS_PER_CM,
	"in": gpd.config.inches_to_points(1.0),
	"px": POINTS_PER_PX,
}

NUMBER_PREFIX = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")
INTEGER_PREFIX = re.compile(r"^\s*([-+]?\d+)")


#============================================
def parse_leading_float(value: str) -> float | None:
	"""
	Parse the numeric prefix of a string.

	Args:
		value: String like "210mm" or "12.5".

	Returns:
		Parsed float, or None when there is no numeric prefix.
	"""
	match = NUMBER_PREFIX.match(value)
	if match is None:
		return None
	return float(match.group(1))


#============================================
def to_points(value: str | float | int | None) -> float:
	"""
	Convert a length string to PDF points.

	Unparsable or zero values fall back to the A4 width so that a corrupt
	stored dimension never breaks an export.

	Args:
		value: Length like "210mm", "8.5in", "96px" or "595".

	Returns:
		Length in points.
	"""
	if value is None:
		return FALLBACK_PAGE_POINTS
	text = str(value).strip()
	number = parse_leading_float(text)
	if number is None:
		return FALLBACK_PAGE_POINTS
	for suffix, factor in UNIT_FACTORS.items():
		if text.endswith(suffix):
			return number * factor
	if number == 0.0:
		return FALLBACK_PAGE_POINTS
	return number


#============================================
def to_pixels(value: str | float | int | None) -> int:
	"""
	Parse a pixel value like "8px" into an int.

	Args:
		value: Pixel string.

	Returns:
		Integer pixels, 0 when missing, invalid or negative.
	"""
	if value is None:
		return 0
	text = str(value).strip()
	if text.endswith("px"):
		text = text[:-2]
	match = INTEGER_PREFIX.match(text)
	if match is None:
		return 0
	pixels = int(match.group(1))
	return max(0, pixels)


#============================================
def format_points(value: float) -> str:
	"""
	Format a point length for display.

	Args:
		value: Length in points.

	Returns:
		String like "595pt".
	"""
	return f"{round(value)}pt"
