"""
Layout state: placement, collision checks, selection and change broadcast.
"""

# Standard Library
import copy
import dataclasses
import logging
import time
import typing
import uuid

# local repo modules
import grid_pdf_designer as gpd
import grid_pdf_designer.config
import grid_pdf_designer.geometry
import grid_pdf_designer.image_store
import grid_pdf_designer.models


GridConfig = gpd.models.GridConfig
GridPosition = gpd.models.GridPosition
Layout = gpd.models.Layout
LayoutElement = gpd.models.LayoutElement
ElementTemplate = gpd.models.ElementTemplate
ElementStyles = gpd.models.ElementStyles
ElementUpdate = gpd.models.ElementUpdate
ImageStore = gpd.image_store.ImageStore

MIN_GRID_COLUMNS = gpd.config.MIN_GRID_COLUMNS
MAX_GRID_COLUMNS = gpd.config.MAX_GRID_COLUMNS
MIN_GRID_ROWS = gpd.config.MIN_GRID_ROWS
MAX_GRID_ROWS = gpd.config.MAX_GRID_ROWS
MIN_GRID_GAP = gpd.config.MIN_GRID_GAP
MAX_GRID_GAP = gpd.config.MAX_GRID_GAP
ORIENTATIONS = gpd.config.ORIENTATIONS
DEFAULT_IMAGE_FIT = gpd.config.DEFAULT_IMAGE_FIT

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class LayoutChange:
	kind: str
	layout: Layout
	selected_id: str | None


Subscriber = typing.Callable[[LayoutChange], None]


#============================================
def generate_element_id() -> str:
	"""
	Generate a unique element id.

	Returns:
		Id like "element-1700000000000-1a2b3c4d5".
	"""
	millis = int(time.time() * 1000)
	return f"element-{millis}-{uuid.uuid4().hex[:9]}"


#============================================
def grid_config_valid(grid: GridConfig) -> bool:
	"""
	Check grid dimensions, gap and orientation against their bounds.

	Args:
		grid: Grid configuration.

	Returns:
		True if every field is within bounds.
	"""
	if not MIN_GRID_COLUMNS <= grid.columns <= MAX_GRID_COLUMNS:
		return False
	if not MIN_GRID_ROWS <= grid.rows <= MAX_GRID_ROWS:
		return False
	if not MIN_GRID_GAP <= grid.gap <= MAX_GRID_GAP:
		return False
	return grid.page.orientation in ORIENTATIONS


#============================================
def layout_valid(layout: Layout) -> bool:
	"""
	Check a whole layout against the engine invariants.

	Args:
		layout: Candidate layout.

	Returns:
		True if the grid is within bounds, every element fits the grid, ids
		are unique and no two footprints overlap.
	"""
	if not grid_config_valid(layout.grid):
		return False
	seen_ids: set[str] = set()
	for index, element in enumerate(layout.elements):
		if element.id in seen_ids:
			return False
		seen_ids.add(element.id)
		if not gpd.geometry.position_in_bounds(layout.grid, element.grid_position):
			return False
		for other in layout.elements[:index]:
			if gpd.geometry.positions_overlap(element.grid_position, other.grid_position):
				return False
	return True


#============================================
def default_layout() -> Layout:
	"""
	Build the empty 12x8 A4 portrait layout.
	"""
	return Layout(grid=GridConfig(), elements=[])


class LayoutEngine:
	"""
	Single owner of the mutable layout aggregate.

	Every accepted mutation is pushed to all subscribers before the
	mutating call returns. Rejected moves and resizes leave the state
	untouched and notify nobody.
	"""

	def __init__(self, layout: Layout | None = None):
		if layout is None:
			layout = default_layout()
		elif not layout_valid(layout):
			raise ValueError("Layout violates grid bounds, id uniqueness or overlap rules")
		self._layout = layout
		self._selected_id: str | None = None
		self._subscribers: list[Subscriber] = []

	@property
	def layout(self) -> Layout:
		return self._layout

	@property
	def grid(self) -> GridConfig:
		return self._layout.grid

	@property
	def selected_id(self) -> str | None:
		return self._selected_id

	#============================================
	def subscribe(self, callback: Subscriber) -> typing.Callable[[], None]:
		"""
		Register a change listener.

		Args:
			callback: Called with a LayoutChange after each mutation.

		Returns:
			Function that removes the listener.
		"""
		self._subscribers.append(callback)

		def unsubscribe() -> None:
			if callback in self._subscribers:
				self._subscribers.remove(callback)

		return unsubscribe

	def _notify(self, kind: str) -> None:
		change = LayoutChange(kind=kind, layout=self._layout, selected_id=self._selected_id)
		for callback in list(self._subscribers):
			callback(change)

	#============================================
	def snapshot(self) -> Layout:
		"""
		Return a deep copy of the current layout.
		"""
		return copy.deepcopy(self._layout)

	def get_element(self, element_id: str) -> LayoutElement | None:
		for element in self._layout.elements:
			if element.id == element_id:
				return element
		return None

	def _index_of(self, element_id: str) -> int | None:
		for index, element in enumerate(self._layout.elements):
			if element.id == element_id:
				return index
		return None

	def elements_in_cell(self, row: int, col: int) -> list[LayoutElement]:
		return [
			element for element in self._layout.elements
			if gpd.geometry.position_contains_cell(element.grid_position, row, col)
		]

	#============================================
	def has_conflict(self, position: GridPosition, exclude_id: str | None = None) -> bool:
		"""
		Check a candidate footprint against every other element.

		Args:
			position: Candidate footprint.
			exclude_id: Element to leave out of the check (the one moving).

		Returns:
			True if the footprint overlaps another element.
		"""
		for other in self._layout.elements:
			if other.id == exclude_id:
				continue
			if gpd.geometry.positions_overlap(position, other.grid_position):
				return True
		return False

	#============================================
	def place(self, template: ElementTemplate, row: int, col: int) -> LayoutElement:
		"""
		Create a 1x1 element from a template at a cell.

		Bounds are validated by the caller before placing.

		Args:
			template: Element template.
			row: 1-based row.
			col: 1-based column.

		Returns:
			The new LayoutElement.
		"""
		styles = copy.deepcopy(template.default_styles)
		if styles is None:
			styles = ElementStyles()
		element = LayoutElement(
			id=generate_element_id(),
			type=template.type,
			grid_position=GridPosition(
				start_col=col,
				end_col=col + 1,
				start_row=row,
				end_row=row + 1,
			),
			content=template.default_content,
			styles=styles,
		)
		if template.type == "image":
			element.src = ""
			element.fit = DEFAULT_IMAGE_FIT
		self._layout.elements.append(element)
		logger.debug("Placed %s element %s at (%d, %d)", element.type, element.id, row, col)
		self._notify("place")
		return element

	def _relocate(self, element_id: str, position: GridPosition, kind: str) -> bool:
		index = self._index_of(element_id)
		if index is None:
			return False
		if not gpd.geometry.position_in_bounds(self._layout.grid, position):
			return False
		if self.has_conflict(position, exclude_id=element_id):
			return False
		element = self._layout.elements[index]
		self._layout.elements[index] = dataclasses.replace(element, grid_position=position)
		self._notify(kind)
		return True

	#============================================
	def move(self, element_id: str, new_row: int, new_col: int) -> bool:
		"""
		Move an element so its top-left cell is (new_row, new_col).

		Args:
			element_id: Element to move.
			new_row: Target 1-based row.
			new_col: Target 1-based column.

		Returns:
			True if the move was applied.
		"""
		element = self.get_element(element_id)
		if element is None:
			return False
		current = element.grid_position
		if current.start_row == new_row and current.start_col == new_col:
			return False
		col_span, row_span = gpd.geometry.span_of(current)
		position = GridPosition(
			start_col=new_col,
			end_col=new_col + col_span,
			start_row=new_row,
			end_row=new_row + row_span,
		)
		return self._relocate(element_id, position, "move")

	#============================================
	def resize(self, element_id: str, new_col_span: int, new_row_span: int) -> bool:
		"""
		Resize an element, keeping its top-left cell fixed.

		Args:
			element_id: Element to resize.
			new_col_span: Columns to span, at least 1.
			new_row_span: Rows to span, at least 1.

		Returns:
			True if the resize was applied.
		"""
		element = self.get_element(element_id)
		if element is None:
			return False
		if new_col_span < 1 or new_row_span < 1:
			return False
		current = element.grid_position
		if gpd.geometry.span_of(current) == (new_col_span, new_row_span):
			return False
		position = GridPosition(
			start_col=current.start_col,
			end_col=current.start_col + new_col_span,
			start_row=current.start_row,
			end_row=current.start_row + new_row_span,
		)
		return self._relocate(element_id, position, "resize")

	#============================================
	def update_element(self, element_id: str, update: ElementUpdate) -> bool:
		"""
		Apply a content, source, fit or style update to an element.

		Args:
			element_id: Element to update.
			update: One of the ElementUpdate variants.

		Returns:
			True if the element exists and was updated.
		"""
		index = self._index_of(element_id)
		if index is None:
			return False
		element = self._layout.elements[index]
		self._layout.elements[index] = gpd.models.apply_update(element, update)
		self._notify("update")
		return True

	def remove(self, element_id: str) -> None:
		index = self._index_of(element_id)
		if index is None:
			return
		del self._layout.elements[index]
		if self._selected_id == element_id:
			self._selected_id = None
		self._notify("remove")

	def select(self, element_id: str | None) -> None:
		self._selected_id = element_id
		self._notify("select")

	def selected_element(self) -> LayoutElement | None:
		if not self._selected_id:
			return None
		return self.get_element(self._selected_id)

	#============================================
	def update_grid(self, grid: GridConfig) -> bool:
		"""
		Replace the grid configuration.

		Rejected when a bound is violated or when an existing element
		would no longer fit inside the new grid.

		Args:
			grid: New grid configuration.

		Returns:
			True if the grid was replaced.
		"""
		if not grid_config_valid(grid):
			logger.debug("Rejected grid %dx%d gap %d", grid.columns, grid.rows, grid.gap)
			return False
		for element in self._layout.elements:
			if not gpd.geometry.position_in_bounds(grid, element.grid_position):
				return False
		self._layout.grid = copy.deepcopy(grid)
		self._notify("grid")
		return True

	#============================================
	def load_layout(self, layout: Layout) -> bool:
		"""
		Replace the whole layout, clearing the selection.

		Args:
			layout: Layout to install.

		Returns:
			True if installed; False if the layout fails layout_valid.
		"""
		if not layout_valid(layout):
			logger.debug("Rejected layout with %d elements", len(layout.elements))
			return False
		self._layout = layout
		self._selected_id = None
		self._notify("load")
		return True

	def reset_layout(self) -> None:
		self._layout = default_layout()
		self._selected_id = None
		self._notify("reset")


@dataclasses.dataclass
class DesignerContext:
	engine: LayoutEngine = dataclasses.field(default_factory=LayoutEngine)
	image_store: ImageStore = dataclasses.field(default_factory=ImageStore)
