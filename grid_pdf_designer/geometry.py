"""
Grid cell math and footprint overlap tests.

All rectangles use a top-left origin in PDF points. The export pipeline
flips to the bottom-left origin of the canvas at paint time.
"""

# local repo modules
import grid_pdf_designer as gpd
import grid_pdf_designer.config
import grid_pdf_designer.models
import grid_pdf_designer.units


GridConfig = gpd.models.GridConfig
GridPosition = gpd.models.GridPosition
Rect = gpd.models.Rect

PDF_MARGIN = gpd.config.PDF_MARGIN
POINTS_PER_PX = gpd.config.POINTS_PER_PX


#============================================
def compute_cells(grid: GridConfig) -> list[tuple[int, int]]:
	"""
	List every grid cell in row-major order.

	Args:
		grid: Grid configuration.

	Returns:
		List of 1-based (row, col) pairs.
	"""
	cells: list[tuple[int, int]] = []
	for row in range(1, grid.rows + 1):
		for col in range(1, grid.columns + 1):
			cells.append((row, col))
	return cells


#============================================
def oriented_page_size(grid: GridConfig) -> tuple[float, float]:
	"""
	Resolve the page size in points, swapping axes for landscape.

	Args:
		grid: Grid configuration.

	Returns:
		Tuple of (width, height) in points.
	"""
	width = gpd.units.to_points(grid.page.width)
	height = gpd.units.to_points(grid.page.height)
	if grid.page.orientation == "landscape":
		return (height, width)
	return (width, height)


#============================================
def cell_rect(
	grid: GridConfig,
	page_dimensions: tuple[float, float],
	row: int,
	col: int,
) -> Rect:
	"""
	Compute the rectangle of a single cell, including the grid gap.

	Args:
		grid: Grid configuration.
		page_dimensions: Oriented page (width, height) in points.
		row: 1-based row.
		col: 1-based column.

	Returns:
		Cell rectangle in points.
	"""
	page_width, page_height = page_dimensions
	gap = grid.gap * POINTS_PER_PX
	available_width = page_width - 2.0 * PDF_MARGIN - (grid.columns - 1) * gap
	available_height = page_height - 2.0 * PDF_MARGIN - (grid.rows - 1) * gap
	cell_width = available_width / grid.columns
	cell_height = available_height / grid.rows
	x = PDF_MARGIN + (col - 1) * (cell_width + gap)
	y = PDF_MARGIN + (row - 1) * (cell_height + gap)
	return Rect(x=x, y=y, width=cell_width, height=cell_height)


#============================================
def cell_size(grid: GridConfig, page_dimensions: tuple[float, float]) -> tuple[float, float]:
	"""
	Compute the gapless cell size used for element placement on export.

	Args:
		grid: Grid configuration.
		page_dimensions: Oriented page (width, height) in points.

	Returns:
		Tuple of (cell_width, cell_height).
	"""
	page_width, page_height = page_dimensions
	cell_width = (page_width - 2.0 * PDF_MARGIN) / grid.columns
	cell_height = (page_height - 2.0 * PDF_MARGIN) / grid.rows
	return (cell_width, cell_height)


#============================================
def element_rect(
	grid: GridConfig,
	page_dimensions: tuple[float, float],
	position: GridPosition,
) -> Rect:
	"""
	Compute the absolute rectangle of an element footprint.

	Args:
		grid: Grid configuration.
		page_dimensions: Oriented page (width, height) in points.
		position: Element grid position.

	Returns:
		Element rectangle in points.
	"""
	cell_width, cell_height = cell_size(grid, page_dimensions)
	col_span, row_span = span_of(position)
	x = PDF_MARGIN + (position.start_col - 1) * cell_width
	y = PDF_MARGIN + (position.start_row - 1) * cell_height
	return Rect(x=x, y=y, width=col_span * cell_width, height=row_span * cell_height)


#============================================
def span_of(position: GridPosition) -> tuple[int, int]:
	"""Return the (col_span, row_span) of a footprint."""
	return (position.end_col - position.start_col, position.end_row - position.start_row)


#============================================
def positions_overlap(pos_a: GridPosition, pos_b: GridPosition) -> bool:
	"""
	Check whether two footprints overlap. Shared edges do not count.

	Args:
		pos_a: First footprint.
		pos_b: Second footprint.

	Returns:
		True if the footprints overlap.
	"""
	return not (
		pos_a.end_col <= pos_b.start_col
		or pos_a.start_col >= pos_b.end_col
		or pos_a.end_row <= pos_b.start_row
		or pos_a.start_row >= pos_b.end_row
	)


#============================================
def position_in_bounds(grid: GridConfig, position: GridPosition) -> bool:
	"""
	Check that a footprint is well formed and fits inside the grid.

	Args:
		grid: Grid configuration.
		position: Footprint to check.

	Returns:
		True if the footprint is valid for the grid.
	"""
	if position.end_col <= position.start_col or position.end_row <= position.start_row:
		return False
	if position.start_col < 1 or position.start_row < 1:
		return False
	return position.end_col <= grid.columns + 1 and position.end_row <= grid.rows + 1


#============================================
def position_contains_cell(position: GridPosition, row: int, col: int) -> bool:
	"""
	Check whether a footprint covers a cell.

	Args:
		position: Footprint.
		row: 1-based row.
		col: 1-based column.

	Returns:
		True if the cell lies inside the footprint.
	"""
	return (
		position.start_col <= col < position.end_col
		and position.start_row <= row < position.end_row
	)
