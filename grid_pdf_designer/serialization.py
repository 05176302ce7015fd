"""
Layout JSON load and save.

The wire format keeps the camelCase field names of the layout files
written by the designer: {"grid": {...}, "elements": [...]}.
"""

# Standard Library
import json
import pathlib

# local repo modules
import grid_pdf_designer as gpd
import grid_pdf_designer.config
import grid_pdf_designer.models


Layout = gpd.models.Layout
LayoutElement = gpd.models.LayoutElement
GridConfig = gpd.models.GridConfig
GridPosition = gpd.models.GridPosition
PageConfig = gpd.models.PageConfig
ElementStyles = gpd.models.ElementStyles
STYLE_ATTRIBUTES = gpd.models.STYLE_ATTRIBUTES

ELEMENT_TYPES = gpd.config.ELEMENT_TYPES


class LayoutFormatError(Exception):
	"""Raised when layout JSON is malformed or misses required fields."""


#============================================
def styles_to_dict(styles: ElementStyles) -> dict:
	data = {}
	for key, attribute in STYLE_ATTRIBUTES.items():
		value = getattr(styles, attribute)
		if value is not None:
			data[key] = value
	return data


#============================================
def element_to_dict(element: LayoutElement) -> dict:
	"""
	Convert an element to its JSON shape, omitting unset optional fields.

	Args:
		element: Layout element.

	Returns:
		JSON-ready dict.
	"""
	position = element.grid_position
	data = {
		"id": element.id,
		"type": element.type,
		"gridPosition": {
			"startCol": position.start_col,
			"endCol": position.end_col,
			"startRow": position.start_row,
			"endRow": position.end_row,
		},
	}
	if element.content is not None:
		data["content"] = element.content
	if element.src is not None:
		data["src"] = element.src
	if element.fit is not None:
		data["fit"] = element.fit
	if element.styles is not None:
		data["styles"] = styles_to_dict(element.styles)
	return data


#============================================
def layout_to_dict(layout: Layout) -> dict:
	"""
	Convert a layout to its JSON shape.

	Args:
		layout: Layout to convert.

	Returns:
		JSON-ready dict.
	"""
	grid = layout.grid
	return {
		"grid": {
			"columns": grid.columns,
			"rows": grid.rows,
			"gap": grid.gap,
			"page": {
				"width": grid.page.width,
				"height": grid.page.height,
				"orientation": grid.page.orientation,
			},
		},
		"elements": [element_to_dict(element) for element in layout.elements],
	}


#============================================
def require(data: dict, key: str, context: str):
	if not isinstance(data, dict):
		raise LayoutFormatError(f"{context} must be an object")
	if key not in data:
		raise LayoutFormatError(f"{context} is missing '{key}'")
	return data[key]


#============================================
def require_int(data: dict, key: str, context: str) -> int:
	value = require(data, key, context)
	if isinstance(value, bool) or not isinstance(value, int):
		raise LayoutFormatError(f"{context}.{key} must be an integer, got {value!r}")
	return value


#============================================
def grid_from_dict(data: dict) -> GridConfig:
	page = require(data, "page", "grid")
	return GridConfig(
		columns=require_int(data, "columns", "grid"),
		rows=require_int(data, "rows", "grid"),
		gap=require_int(data, "gap", "grid"),
		page=PageConfig(
			width=require(page, "width", "grid.page"),
			height=require(page, "height", "grid.page"),
			orientation=require(page, "orientation", "grid.page"),
		),
	)


#============================================
def styles_from_dict(data: dict, context: str) -> ElementStyles:
	if not isinstance(data, dict):
		raise LayoutFormatError(f"{context}.styles must be an object")
	values = {}
	for key, attribute in STYLE_ATTRIBUTES.items():
		if key in data:
			values[attribute] = data[key]
	return ElementStyles(**values)


#============================================
def element_from_dict(data: dict, index: int) -> LayoutElement:
	"""
	Build an element from its JSON shape.

	Args:
		data: Element dict.
		index: Position in the element list, used in error messages.

	Returns:
		LayoutElement.
	"""
	context = f"elements[{index}]"
	element_type = require(data, "type", context)
	if element_type not in ELEMENT_TYPES:
		raise LayoutFormatError(f"{context}.type must be one of {ELEMENT_TYPES}, got {element_type!r}")
	position = require(data, "gridPosition", context)
	position_context = f"{context}.gridPosition"
	styles = None
	if "styles" in data:
		styles = styles_from_dict(data["styles"], context)
	return LayoutElement(
		id=str(require(data, "id", context)),
		type=element_type,
		grid_position=GridPosition(
			start_col=require_int(position, "startCol", position_context),
			end_col=require_int(position, "endCol", position_context),
			start_row=require_int(position, "startRow", position_context),
			end_row=require_int(position, "endRow", position_context),
		),
		content=data.get("content"),
		src=data.get("src"),
		fit=data.get("fit"),
		styles=styles,
	)


#============================================
def layout_from_dict(data: dict) -> Layout:
	"""
	Build a layout from its JSON shape.

	Args:
		data: Parsed JSON object.

	Returns:
		Layout.
	"""
	grid = grid_from_dict(require(data, "grid", "layout"))
	elements_data = require(data, "elements", "layout")
	if not isinstance(elements_data, list):
		raise LayoutFormatError("layout.elements must be a list")
	elements = [element_from_dict(item, index) for index, item in enumerate(elements_data)]
	return Layout(grid=grid, elements=elements)


#============================================
def export_layout_json(layout: Layout) -> str:
	"""
	Serialize a layout to pretty-printed JSON.
	"""
	return json.dumps(layout_to_dict(layout), indent=2)


#============================================
def load_layout_json(text: str) -> Layout:
	"""
	Parse layout JSON text.

	Args:
		text: JSON document.

	Returns:
		Layout.
	"""
	try:
		data = json.loads(text)
	except json.JSONDecodeError as error:
		raise LayoutFormatError(f"Invalid layout file: {error}") from error
	return layout_from_dict(data)


#============================================
def save_layout(layout: Layout, path: pathlib.Path) -> None:
	"""
	Write a layout JSON file.

	Args:
		layout: Layout to save.
		path: Output path.
	"""
	path.write_text(export_layout_json(layout) + "\n", encoding="utf-8")


#============================================
def load_layout(path: pathlib.Path) -> Layout:
	"""
	Read a layout JSON file.

	Args:
		path: Layout file path.

	Returns:
		Layout.
	"""
	return load_layout_json(path.read_text(encoding="utf-8"))
