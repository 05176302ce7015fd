"""
Shared configuration and constants.
"""

# Standard Library
import dataclasses


POINTS_PER_INCH = 72.0
POINTS_PER_MM = 2.834645669
POINTS_PER_CM = 28.34645669
POINTS_PER_PX = 0.75
FALLBACK_PAGE_POINTS = 595.0

PDF_MARGIN = 20.0
LINE_HEIGHT_FACTOR = 1.2

MIN_GRID_COLUMNS = 1
MAX_GRID_COLUMNS = 24
MIN_GRID_ROWS = 1
MAX_GRID_ROWS = 24
MIN_GRID_GAP = 0
MAX_GRID_GAP = 50

DEFAULT_GRID_COLUMNS = 12
DEFAULT_GRID_ROWS = 8
DEFAULT_GRID_GAP = 10
DEFAULT_PAGE_WIDTH = "210mm"
DEFAULT_PAGE_HEIGHT = "297mm"
DEFAULT_ORIENTATION = "portrait"

DEFAULT_TEXT_COLOR = "#333333"
DEFAULT_FONT_SIZE = 14
DEFAULT_TEXT_ALIGN = "left"
DEFAULT_LINE_HEIGHT = 1.5
DEFAULT_PADDING = 8
DEFAULT_BORDER_COLOR = "#cccccc"
DEFAULT_IMAGE_FIT = "cover"
BOLD_WEIGHT_THRESHOLD = 700

DEFAULT_FONT_REGULAR = "Helvetica"
DEFAULT_FONT_BOLD = "Helvetica-Bold"

DEFAULT_FILENAME = "layout-design.pdf"
DEFAULT_QUALITY = 1.0

PLACEHOLDER_STROKE = (200, 200, 200)
PLACEHOLDER_FILL = (245, 245, 245)
PLACEHOLDER_TEXT = (150, 150, 150)
PLACEHOLDER_TEXT_SIZE = 12.0
PLACEHOLDER_LABEL = "No Image"
ERROR_STROKE = (220, 53, 69)
ERROR_FILL = (248, 215, 218)
ERROR_TEXT = (114, 28, 36)
ERROR_TEXT_SIZE = 10.0
ERROR_LABEL = "Image Error"

IMAGE_FETCH_TIMEOUT = 30.0
PROGRESS_BAR_WIDTH = 20

ELEMENT_TYPES = ("text", "image")
FIT_MODES = ("cover", "contain", "fill", "stretch")
ORIENTATIONS = ("portrait", "landscape")


@dataclasses.dataclass
class ExportOptions:
	filename: str = DEFAULT_FILENAME
	quality: float = DEFAULT_QUALITY
	compression: bool = True


@dataclasses.dataclass
class ExportProgress:
	stage: str
	progress: float
	message: str
	element_index: int | None = None
	total_elements: int | None = None


@dataclasses.dataclass
class ExportResult:
	filename: str
	data: bytes
	page_width: float
	page_height: float
	element_count: int
	placeholder_count: int


@dataclasses.dataclass
class PageEstimate:
	width: str
	height: str
	elements: int


#============================================
def inches_to_points(value: float) -> float:
	"""
	Convert inches to points.

	Args:
		value: Inches value.

	Returns:
		Points value.
	"""
	return value * POINTS_PER_INCH
