"""
Read-only catalogs of placeable element templates and page sizes.
"""

# local repo modules
import grid_pdf_designer as gpd
import grid_pdf_designer.config
import grid_pdf_designer.models


ElementTemplate = gpd.models.ElementTemplate
ElementStyles = gpd.models.ElementStyles
PageSize = gpd.models.PageSize


ELEMENT_TEMPLATES = (
	ElementTemplate(
		type="text",
		label="Text Block",
		icon="text_fields",
		default_content="<p>Click to edit text</p>",
		default_styles=ElementStyles(
			color="#333333",
			font_size="14px",
			text_align="left",
			line_height=gpd.config.DEFAULT_LINE_HEIGHT,
		),
	),
	ElementTemplate(
		type="image",
		label="Image",
		icon="image",
		default_styles=ElementStyles(),
	),
)

PAGE_SIZES = (
	PageSize(name="a4", width="210mm", height="297mm", display_name="A4 (210 x 297 mm)"),
	PageSize(name="a3", width="297mm", height="420mm", display_name="A3 (297 x 420 mm)"),
	PageSize(name="a5", width="148mm", height="210mm", display_name="A5 (148 x 210 mm)"),
	PageSize(name="letter", width="8.5in", height="11in", display_name="Letter (8.5 x 11 in)"),
	PageSize(name="legal", width="8.5in", height="14in", display_name="Legal (8.5 x 14 in)"),
	PageSize(name="tabloid", width="11in", height="17in", display_name="Tabloid (11 x 17 in)"),
	PageSize(name="custom", width="210mm", height="297mm", display_name="Custom Size"),
)

DEFAULT_PAGE_SIZE = PAGE_SIZES[0]


#============================================
def get_element_templates() -> list[ElementTemplate]:
	"""
	Return the element templates in palette order.
	"""
	return list(ELEMENT_TEMPLATES)


#============================================
def get_template(element_type: str) -> ElementTemplate | None:
	for template in ELEMENT_TEMPLATES:
		if template.type == element_type:
			return template
	return None


#============================================
def get_page_size(name: str) -> PageSize | None:
	"""
	Look up a page size by name.

	Args:
		name: Name like "a4" or "letter", case-insensitive.

	Returns:
		PageSize or None when unknown.
	"""
	key = name.strip().lower()
	for page_size in PAGE_SIZES:
		if page_size.name == key:
			return page_size
	return None
