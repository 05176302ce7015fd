"""
Layout data model and element update variants.
"""

# Standard Library
import dataclasses
import enum

# local repo modules
import grid_pdf_designer as gpd
import grid_pdf_designer.config


DEFAULT_GRID_COLUMNS = gpd.config.DEFAULT_GRID_COLUMNS
DEFAULT_GRID_ROWS = gpd.config.DEFAULT_GRID_ROWS
DEFAULT_GRID_GAP = gpd.config.DEFAULT_GRID_GAP
DEFAULT_PAGE_WIDTH = gpd.config.DEFAULT_PAGE_WIDTH
DEFAULT_PAGE_HEIGHT = gpd.config.DEFAULT_PAGE_HEIGHT
DEFAULT_ORIENTATION = gpd.config.DEFAULT_ORIENTATION


@dataclasses.dataclass
class PageConfig:
	width: str = DEFAULT_PAGE_WIDTH
	height: str = DEFAULT_PAGE_HEIGHT
	orientation: str = DEFAULT_ORIENTATION


@dataclasses.dataclass
class GridConfig:
	columns: int = DEFAULT_GRID_COLUMNS
	rows: int = DEFAULT_GRID_ROWS
	gap: int = DEFAULT_GRID_GAP
	page: PageConfig = dataclasses.field(default_factory=PageConfig)


@dataclasses.dataclass
class GridPosition:
	start_col: int
	end_col: int
	start_row: int
	end_row: int


class StyleKey(enum.Enum):
	COLOR = "color"
	FONT_SIZE = "fontSize"
	FONT_WEIGHT = "fontWeight"
	TEXT_ALIGN = "textAlign"
	LINE_HEIGHT = "lineHeight"
	BACKGROUND_COLOR = "backgroundColor"
	PADDING = "padding"
	BORDER = "border"
	BORDER_WIDTH = "borderWidth"
	BORDER_COLOR = "borderColor"
	BORDER_RADIUS = "borderRadius"


# JSON key -> ElementStyles attribute
STYLE_ATTRIBUTES = {
	StyleKey.COLOR.value: "color",
	StyleKey.FONT_SIZE.value: "font_size",
	StyleKey.FONT_WEIGHT.value: "font_weight",
	StyleKey.TEXT_ALIGN.value: "text_align",
	StyleKey.LINE_HEIGHT.value: "line_height",
	StyleKey.BACKGROUND_COLOR.value: "background_color",
	StyleKey.PADDING.value: "padding",
	StyleKey.BORDER.value: "border",
	StyleKey.BORDER_WIDTH.value: "border_width",
	StyleKey.BORDER_COLOR.value: "border_color",
	StyleKey.BORDER_RADIUS.value: "border_radius",
}


@dataclasses.dataclass(frozen=True)
class ElementStyles:
	color: str | None = None
	font_size: str | None = None
	font_weight: str | int | None = None
	text_align: str | None = None
	line_height: float | None = None
	background_color: str | None = None
	padding: str | None = None
	border: str | None = None
	border_width: str | None = None
	border_color: str | None = None
	border_radius: str | None = None


@dataclasses.dataclass
class LayoutElement:
	id: str
	type: str
	grid_position: GridPosition
	content: str | None = None
	src: str | None = None
	fit: str | None = None
	styles: ElementStyles | None = None


@dataclasses.dataclass
class Layout:
	grid: GridConfig = dataclasses.field(default_factory=GridConfig)
	elements: list[LayoutElement] = dataclasses.field(default_factory=list)


@dataclasses.dataclass(frozen=True)
class ElementTemplate:
	type: str
	label: str
	icon: str | None = None
	default_content: str | None = None
	default_styles: ElementStyles | None = None


@dataclasses.dataclass(frozen=True)
class PageSize:
	name: str
	width: str
	height: str
	display_name: str


@dataclasses.dataclass(frozen=True)
class Rect:
	x: float
	y: float
	width: float
	height: float


@dataclasses.dataclass(frozen=True)
class ContentUpdate:
	content: str | None


@dataclasses.dataclass(frozen=True)
class SourceUpdate:
	src: str | None


@dataclasses.dataclass(frozen=True)
class FitUpdate:
	fit: str


@dataclasses.dataclass(frozen=True)
class StyleUpdate:
	key: StyleKey
	value: str | float | None


ElementUpdate = ContentUpdate | SourceUpdate | FitUpdate | StyleUpdate


#============================================
def apply_update(element: LayoutElement, update: ElementUpdate) -> LayoutElement:
	"""
	Return a copy of an element with one update applied.

	The element id and grid position are carried over unchanged.

	Args:
		element: Element to update.
		update: Update variant.

	Returns:
		Updated LayoutElement.
	"""
	if isinstance(update, ContentUpdate):
		return dataclasses.replace(element, content=update.content)
	if isinstance(update, SourceUpdate):
		return dataclasses.replace(element, src=update.src)
	if isinstance(update, FitUpdate):
		return dataclasses.replace(element, fit=update.fit)
	if isinstance(update, StyleUpdate):
		styles = element.styles or ElementStyles()
		attribute = STYLE_ATTRIBUTES[update.key.value]
		new_styles = dataclasses.replace(styles, **{attribute: update.value})
		return dataclasses.replace(element, styles=new_styles)
	raise TypeError(f"Unsupported element update: {update!r}")
