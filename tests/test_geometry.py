import pytest

import grid_pdf_designer.geometry as geometry
import grid_pdf_designer.models as models


#============================================
def build_grid(columns: int = 12, rows: int = 8, gap: int = 10, orientation: str = "portrait") -> models.GridConfig:
	"""
	Build an A4 grid configuration for tests.
	"""
	page = models.PageConfig(width="210mm", height="297mm", orientation=orientation)
	return models.GridConfig(columns=columns, rows=rows, gap=gap, page=page)


#============================================
def position(start_col: int, end_col: int, start_row: int, end_row: int) -> models.GridPosition:
	return models.GridPosition(start_col=start_col, end_col=end_col, start_row=start_row, end_row=end_row)


#============================================
def test_compute_cells_row_major() -> None:
	"""
	A 3x2 grid yields six cells in row-major order from (1, 1).
	"""
	cells = geometry.compute_cells(build_grid(columns=3, rows=2))
	assert cells == [(1, 1), (1, 2), (1, 3), (2, 1), (2, 2), (2, 3)]


#============================================
def test_oriented_page_size_swaps_for_landscape() -> None:
	"""
	Landscape swaps the page axes.
	"""
	width, height = geometry.oriented_page_size(build_grid())
	assert width == pytest.approx(595.28, abs=0.01)
	assert height == pytest.approx(841.89, abs=0.01)
	width, height = geometry.oriented_page_size(build_grid(orientation="landscape"))
	assert width == pytest.approx(841.89, abs=0.01)
	assert height == pytest.approx(595.28, abs=0.01)


#============================================
def test_cell_rects_within_page() -> None:
	"""
	Ensure every cell rectangle lies on the page.
	"""
	for orientation in ("portrait", "landscape"):
		grid = build_grid(orientation=orientation)
		page_width, page_height = geometry.oriented_page_size(grid)
		for row, col in geometry.compute_cells(grid):
			rect = geometry.cell_rect(grid, (page_width, page_height), row, col)
			assert 0.0 <= rect.x < rect.x + rect.width <= page_width + 0.001
			assert 0.0 <= rect.y < rect.y + rect.height <= page_height + 0.001


#============================================
def test_cell_rects_separated_by_gap() -> None:
	"""
	Adjacent cells are separated by the gap converted to points.
	"""
	grid = build_grid(gap=10)
	page = geometry.oriented_page_size(grid)
	left = geometry.cell_rect(grid, page, 1, 1)
	right = geometry.cell_rect(grid, page, 1, 2)
	below = geometry.cell_rect(grid, page, 2, 1)
	assert right.x - (left.x + left.width) == pytest.approx(7.5)
	assert below.y - (left.y + left.height) == pytest.approx(7.5)
	assert left.x == pytest.approx(20.0)
	assert left.y == pytest.approx(20.0)


#============================================
def test_element_rect_full_first_row() -> None:
	"""
	A full-width first-row element spans the page between the margins.
	"""
	grid = build_grid()
	page_width, page_height = geometry.oriented_page_size(grid)
	rect = geometry.element_rect(grid, (page_width, page_height), position(1, 13, 1, 2))
	assert rect.x == pytest.approx(20.0)
	assert rect.y == pytest.approx(20.0)
	assert rect.width == pytest.approx(page_width - 40.0)
	assert rect.height == pytest.approx((page_height - 40.0) / 8)


#============================================
def test_positions_overlap_open_interval() -> None:
	"""
	Touching edges do not overlap; shared cells do.
	"""
	base = position(1, 3, 1, 3)
	assert geometry.positions_overlap(base, position(2, 4, 2, 4))
	assert geometry.positions_overlap(base, position(1, 2, 1, 2))
	assert not geometry.positions_overlap(base, position(3, 5, 1, 3))
	assert not geometry.positions_overlap(base, position(1, 3, 3, 4))
	assert not geometry.positions_overlap(base, position(5, 6, 5, 6))


#============================================
def test_position_in_bounds() -> None:
	grid = build_grid(columns=4, rows=3)
	assert geometry.position_in_bounds(grid, position(1, 5, 1, 4))
	assert not geometry.position_in_bounds(grid, position(2, 6, 1, 2))
	assert not geometry.position_in_bounds(grid, position(1, 2, 3, 5))
	assert not geometry.position_in_bounds(grid, position(0, 1, 1, 2))
	assert not geometry.position_in_bounds(grid, position(2, 2, 1, 2))


#============================================
def test_position_contains_cell() -> None:
	footprint = position(2, 4, 1, 3)
	assert geometry.position_contains_cell(footprint, 1, 2)
	assert geometry.position_contains_cell(footprint, 2, 3)
	assert not geometry.position_contains_cell(footprint, 1, 4)
	assert not geometry.position_contains_cell(footprint, 3, 2)
