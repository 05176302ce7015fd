"""
Style resolution: colors, lengths and alignment with documented defaults.
"""

# Standard Library
import dataclasses
import re

# local repo modules
import grid_pdf_designer as gpd
import grid_pdf_designer.config
import grid_pdf_designer.models
import grid_pdf_designer.units


ElementStyles = gpd.models.ElementStyles

DEFAULT_TEXT_COLOR = gpd.config.DEFAULT_TEXT_COLOR
DEFAULT_FONT_SIZE = gpd.config.DEFAULT_FONT_SIZE
DEFAULT_TEXT_ALIGN = gpd.config.DEFAULT_TEXT_ALIGN
DEFAULT_PADDING = gpd.config.DEFAULT_PADDING
DEFAULT_BORDER_COLOR = gpd.config.DEFAULT_BORDER_COLOR
DEFAULT_FONT_REGULAR = gpd.config.DEFAULT_FONT_REGULAR
DEFAULT_FONT_BOLD = gpd.config.DEFAULT_FONT_BOLD
BOLD_WEIGHT_THRESHOLD = gpd.config.BOLD_WEIGHT_THRESHOLD

HEX_COLOR = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)
TEXT_ALIGNS = ("left", "center", "right")


@dataclasses.dataclass(frozen=True)
class TextStyle:
	color: tuple[int, int, int]
	font_name: str
	font_size: float
	bold: bool
	text_align: str
	padding: float


@dataclasses.dataclass(frozen=True)
class BoxStyle:
	background: tuple[int, int, int] | None
	border_width: float
	border_color: tuple[int, int, int] | None
	border_radius: float


#============================================
def parse_hex_color(value: str | None) -> tuple[int, int, int]:
	"""
	Parse a hex color string into RGB ints.

	Args:
		value: Color string like "#AABBCC" or "aabbcc".

	Returns:
		Tuple of (r, g, b) in 0-255, black when malformed.
	"""
	if not isinstance(value, str):
		return (0, 0, 0)
	match = HEX_COLOR.match(value.strip())
	if match is None:
		return (0, 0, 0)
	return (int(match.group(1), 16), int(match.group(2), 16), int(match.group(3), 16))


#============================================
def to_unit_rgb(rgb: tuple[int, int, int]) -> tuple[float, float, float]:
	"""
	Scale 0-255 RGB to the 0.0-1.0 range used by the canvas.
	"""
	return (rgb[0] / 255.0, rgb[1] / 255.0, rgb[2] / 255.0)


#============================================
def is_bold(font_weight: str | int | None) -> bool:
	"""
	Decide whether a CSS font weight maps to the bold face.

	Args:
		font_weight: Weight like "bold", "normal" or 700.

	Returns:
		True for bold weights.
	"""
	if font_weight is None:
		return False
	text = str(font_weight).strip().lower()
	if text in ("bold", "bolder"):
		return True
	if text.isdigit():
		return int(text) >= BOLD_WEIGHT_THRESHOLD
	return False


#============================================
def map_font_name(bold: bool) -> str:
	"""
	Map a weight flag to a standard PDF font name.
	"""
	if bold:
		return DEFAULT_FONT_BOLD
	return DEFAULT_FONT_REGULAR


#============================================
def resolve_text_style(styles: ElementStyles | None) -> TextStyle:
	"""
	Resolve text drawing parameters, applying defaults for missing keys.

	Stored styles are only read, never written.

	Args:
		styles: Element styles or None.

	Returns:
		TextStyle.
	"""
	if styles is None:
		styles = ElementStyles()
	font_size = gpd.units.to_pixels(styles.font_size) or DEFAULT_FONT_SIZE
	padding = gpd.units.to_pixels(styles.padding) or DEFAULT_PADDING
	color = parse_hex_color(styles.color or DEFAULT_TEXT_COLOR)
	bold = is_bold(styles.font_weight)
	text_align = (styles.text_align or DEFAULT_TEXT_ALIGN).strip().lower()
	if text_align not in TEXT_ALIGNS:
		# justify and unknown values paint as left
		text_align = DEFAULT_TEXT_ALIGN
	return TextStyle(
		color=color,
		font_name=map_font_name(bold),
		font_size=float(font_size),
		bold=bold,
		text_align=text_align,
		padding=float(padding),
	)


#============================================
def parse_border_shorthand(value: str | None) -> tuple[int, tuple[int, int, int] | None]:
	"""
	Parse a CSS border shorthand like "2px solid #ff0000".

	Args:
		value: Border shorthand.

	Returns:
		Tuple of (width, color); width 0 means no border.
	"""
	if not value:
		return (0, None)
	width = 0
	color = None
	for token in value.strip().lower().split():
		if token == "none":
			return (0, None)
		if token.endswith("px") or token.isdigit():
			width = gpd.units.to_pixels(token)
		elif token.startswith("#"):
			color = parse_hex_color(token)
	if width <= 0:
		return (0, None)
	if color is None:
		color = parse_hex_color(DEFAULT_BORDER_COLOR)
	return (width, color)


#============================================
def resolve_box_style(styles: ElementStyles | None) -> BoxStyle:
	"""
	Resolve background, border and corner radius.

	An explicit positive borderWidth wins; otherwise the border shorthand
	is used when present.

	Args:
		styles: Element styles or None.

	Returns:
		BoxStyle.
	"""
	if styles is None:
		styles = ElementStyles()
	background = None
	background_value = (styles.background_color or "").strip()
	if background_value and background_value.lower() != "transparent":
		background = parse_hex_color(background_value)

	border_width = gpd.units.to_pixels(styles.border_width)
	border_color = None
	if border_width > 0:
		border_color = parse_hex_color(styles.border_color or DEFAULT_BORDER_COLOR)
	else:
		border_width, border_color = parse_border_shorthand(styles.border)

	return BoxStyle(
		background=background,
		border_width=float(border_width),
		border_color=border_color,
		border_radius=float(gpd.units.to_pixels(styles.border_radius)),
	)
