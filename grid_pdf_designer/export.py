"""
Document export: render a layout snapshot onto a single PDF page.

Stages run in order preparing, processing-elements, processing-images,
finalizing, complete. Each stage reports an ExportProgress event to the
optional observer.
"""

# Standard Library
import asyncio
import copy
import io
import logging
import pathlib
import typing

# PIP3 modules
import bs4
import httpx
import PIL.Image
import pypdf
import pypdf.errors
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import grid_pdf_designer as gpd
import grid_pdf_designer.config
import grid_pdf_designer.geometry
import grid_pdf_designer.image_fit
import grid_pdf_designer.layout_state
import grid_pdf_designer.models
import grid_pdf_designer.styles
import grid_pdf_designer.units


Layout = gpd.models.Layout
LayoutElement = gpd.models.LayoutElement
Rect = gpd.models.Rect
ExportOptions = gpd.config.ExportOptions
ExportProgress = gpd.config.ExportProgress
ExportResult = gpd.config.ExportResult
PageEstimate = gpd.config.PageEstimate
BoxStyle = gpd.styles.BoxStyle
ImageSourceError = gpd.image_fit.ImageSourceError

LINE_HEIGHT_FACTOR = gpd.config.LINE_HEIGHT_FACTOR
DEFAULT_FONT_REGULAR = gpd.config.DEFAULT_FONT_REGULAR
DEFAULT_IMAGE_FIT = gpd.config.DEFAULT_IMAGE_FIT
IMAGE_FETCH_TIMEOUT = gpd.config.IMAGE_FETCH_TIMEOUT
PLACEHOLDER_STROKE = gpd.config.PLACEHOLDER_STROKE
PLACEHOLDER_FILL = gpd.config.PLACEHOLDER_FILL
PLACEHOLDER_TEXT = gpd.config.PLACEHOLDER_TEXT
PLACEHOLDER_TEXT_SIZE = gpd.config.PLACEHOLDER_TEXT_SIZE
PLACEHOLDER_LABEL = gpd.config.PLACEHOLDER_LABEL
ERROR_STROKE = gpd.config.ERROR_STROKE
ERROR_FILL = gpd.config.ERROR_FILL
ERROR_TEXT = gpd.config.ERROR_TEXT
ERROR_TEXT_SIZE = gpd.config.ERROR_TEXT_SIZE
ERROR_LABEL = gpd.config.ERROR_LABEL

STAGE_PREPARING = "preparing"
STAGE_PROCESSING_ELEMENTS = "processing-elements"
STAGE_PROCESSING_IMAGES = "processing-images"
STAGE_FINALIZING = "finalizing"
STAGE_COMPLETE = "complete"
STAGES = (
	STAGE_PREPARING,
	STAGE_PROCESSING_ELEMENTS,
	STAGE_PROCESSING_IMAGES,
	STAGE_FINALIZING,
	STAGE_COMPLETE,
)

ProgressCallback = typing.Callable[[ExportProgress], None]

logger = logging.getLogger(__name__)


class ExportError(Exception):
	"""Raised when the export pipeline fails as a whole."""


class ProgressDispatcher:
	"""
	Delivers progress events on the event loop without blocking the pipeline.

	Events are queued with call_soon so they arrive in emission order. An
	observer that raises is logged and does not affect the export.
	"""

	def __init__(self, callback: ProgressCallback | None, loop: asyncio.AbstractEventLoop):
		self._callback = callback
		self._loop = loop

	def emit(self, progress: ExportProgress) -> None:
		if self._callback is None:
			return
		self._loop.call_soon(self._deliver, progress)

	def _deliver(self, progress: ExportProgress) -> None:
		try:
			self._callback(progress)
		except Exception:
			logger.exception("Progress observer failed at stage %s", progress.stage)

	async def flush(self) -> None:
		# queued callbacks run before this task resumes
		await asyncio.sleep(0)


#============================================
def clean_text_content(markup: str) -> str:
	"""
	Strip markup from element content, decoding entities.

	Args:
		markup: Raw content such as "<p>Hello &amp; bye</p>".

	Returns:
		Plain text.
	"""
	if "<" not in markup and "&" not in markup:
		return markup
	soup = bs4.BeautifulSoup(markup, "html.parser")
	return soup.get_text()


#============================================
def wrap_text(text: str, font_name: str, font_size: float, max_width: float) -> list[str]:
	"""
	Word-wrap text to a width using the canvas font metrics.

	Args:
		text: Plain text, may contain newlines.
		font_name: ReportLab font name.
		font_size: Font size in points.
		max_width: Available width in points.

	Returns:
		Wrapped lines.
	"""
	return reportlab.lib.utils.simpleSplit(text, font_name, font_size, max_width)


#============================================
def flip_y(page_height: float, y: float, height: float = 0.0) -> float:
	"""
	Convert a top-left y coordinate to the canvas bottom-left origin.
	"""
	return page_height - y - height


#============================================
def set_fill(pdf: reportlab.pdfgen.canvas.Canvas, rgb: tuple[int, int, int]) -> None:
	red, green, blue = gpd.styles.to_unit_rgb(rgb)
	pdf.setFillColorRGB(red, green, blue)


#============================================
def set_stroke(pdf: reportlab.pdfgen.canvas.Canvas, rgb: tuple[int, int, int]) -> None:
	red, green, blue = gpd.styles.to_unit_rgb(rgb)
	pdf.setStrokeColorRGB(red, green, blue)


#============================================
def draw_box(
	pdf: reportlab.pdfgen.canvas.Canvas,
	rect: Rect,
	page_height: float,
	radius: float,
	stroke: int,
	fill: int,
) -> None:
	"""
	Draw a plain or rounded rectangle given in top-left coordinates.
	"""
	bottom = flip_y(page_height, rect.y, rect.height)
	if radius > 0.0:
		radius = min(radius, rect.width / 2.0, rect.height / 2.0)
		pdf.roundRect(rect.x, bottom, rect.width, rect.height, radius, stroke=stroke, fill=fill)
		return
	pdf.rect(rect.x, bottom, rect.width, rect.height, stroke=stroke, fill=fill)


#============================================
def draw_background(
	pdf: reportlab.pdfgen.canvas.Canvas,
	rect: Rect,
	box: BoxStyle,
	page_height: float,
) -> None:
	if box.background is None:
		return
	set_fill(pdf, box.background)
	draw_box(pdf, rect, page_height, box.border_radius, stroke=0, fill=1)


#============================================
def draw_border(
	pdf: reportlab.pdfgen.canvas.Canvas,
	rect: Rect,
	box: BoxStyle,
	page_height: float,
) -> None:
	if box.border_width <= 0.0 or box.border_color is None:
		return
	set_stroke(pdf, box.border_color)
	pdf.setLineWidth(box.border_width)
	draw_box(pdf, rect, page_height, box.border_radius, stroke=1, fill=0)


#============================================
def draw_placeholder(
	pdf: reportlab.pdfgen.canvas.Canvas,
	rect: Rect,
	page_height: float,
	error: bool,
) -> None:
	"""
	Draw the "No Image" or "Image Error" placeholder box with a centered label.

	Args:
		pdf: ReportLab canvas.
		rect: Element rectangle.
		page_height: Page height in points.
		error: Draw the error variant.
	"""
	if error:
		stroke_rgb, fill_rgb, text_rgb = ERROR_STROKE, ERROR_FILL, ERROR_TEXT
		text_size, label = ERROR_TEXT_SIZE, ERROR_LABEL
	else:
		stroke_rgb, fill_rgb, text_rgb = PLACEHOLDER_STROKE, PLACEHOLDER_FILL, PLACEHOLDER_TEXT
		text_size, label = PLACEHOLDER_TEXT_SIZE, PLACEHOLDER_LABEL
	pdf.setLineWidth(1.0)
	set_stroke(pdf, stroke_rgb)
	set_fill(pdf, fill_rgb)
	draw_box(pdf, rect, page_height, 0.0, stroke=1, fill=1)
	set_fill(pdf, text_rgb)
	pdf.setFont(DEFAULT_FONT_REGULAR, text_size)
	center_x = rect.x + rect.width / 2.0
	center_y = rect.y + rect.height / 2.0
	pdf.drawCentredString(center_x, flip_y(page_height, center_y), label)


#============================================
def draw_text_element(
	pdf: reportlab.pdfgen.canvas.Canvas,
	element: LayoutElement,
	rect: Rect,
	page_height: float,
) -> int:
	"""
	Draw a text element: background, border, then wrapped lines.

	Lines whose baseline falls past the inner height are dropped without
	any overflow marker.

	Args:
		pdf: ReportLab canvas.
		element: Text element.
		rect: Element rectangle in top-left coordinates.
		page_height: Page height in points.

	Returns:
		Number of lines drawn.
	"""
	style = gpd.styles.resolve_text_style(element.styles)
	box = gpd.styles.resolve_box_style(element.styles)
	draw_background(pdf, rect, box, page_height)
	draw_border(pdf, rect, box, page_height)

	text = clean_text_content(element.content or "")
	if not text.strip():
		return 0

	padding = style.padding
	inner_width = rect.width - 2.0 * padding
	inner_height = rect.height - 2.0 * padding
	lines = wrap_text(text, style.font_name, style.font_size, inner_width)

	pdf.setFont(style.font_name, style.font_size)
	set_fill(pdf, style.color)
	# leading is a fixed factor of the font size; stored lineHeight is not applied
	leading = style.font_size * LINE_HEIGHT_FACTOR
	first_baseline = rect.y + padding + style.font_size
	drawn = 0
	for index, line in enumerate(lines):
		line_y = first_baseline + index * leading
		if line_y > rect.y + inner_height:
			break
		baseline = flip_y(page_height, line_y)
		if style.text_align == "center":
			pdf.drawCentredString(rect.x + padding + inner_width / 2.0, baseline, line)
		elif style.text_align == "right":
			pdf.drawRightString(rect.x + padding + inner_width, baseline, line)
		else:
			pdf.drawString(rect.x + padding, baseline, line)
		drawn += 1
	return drawn


#============================================
def build_image_reader(image: PIL.Image.Image, quality: float) -> reportlab.lib.utils.ImageReader:
	"""
	Wrap a decoded image for the canvas, re-encoding as JPEG below full quality.

	Args:
		image: Decoded PIL image.
		quality: 0.0-1.0 quality; 1.0 keeps the image lossless.

	Returns:
		ImageReader instance.
	"""
	if quality >= 1.0:
		return reportlab.lib.utils.ImageReader(image)
	jpeg_quality = max(1, min(95, int(round(quality * 100))))
	buffer = io.BytesIO()
	image.convert("RGB").save(buffer, format="JPEG", quality=jpeg_quality)
	buffer.seek(0)
	return reportlab.lib.utils.ImageReader(PIL.Image.open(buffer))


#============================================
def draw_fitted_image(
	pdf: reportlab.pdfgen.canvas.Canvas,
	image_reader: reportlab.lib.utils.ImageReader,
	rect: Rect,
	fit_rect: Rect,
	page_height: float,
) -> None:
	"""
	Draw an image at its fit rectangle, clipped to the element rectangle.
	"""
	pdf.saveState()
	try:
		clip = pdf.beginPath()
		clip.rect(rect.x, flip_y(page_height, rect.y, rect.height), rect.width, rect.height)
		pdf.clipPath(clip, stroke=0, fill=0)
		image_x = rect.x + fit_rect.x
		image_y = flip_y(page_height, rect.y + fit_rect.y, fit_rect.height)
		pdf.drawImage(
			image_reader,
			image_x,
			image_y,
			width=fit_rect.width,
			height=fit_rect.height,
			mask="auto",
			preserveAspectRatio=False,
			anchor="sw",
		)
	finally:
		pdf.restoreState()


#============================================
async def draw_image_element(
	pdf: reportlab.pdfgen.canvas.Canvas,
	element: LayoutElement,
	rect: Rect,
	page_height: float,
	options: ExportOptions,
	client: httpx.AsyncClient,
) -> bool:
	"""
	Draw an image element, or a placeholder when the image is missing or broken.

	Args:
		pdf: ReportLab canvas.
		element: Image element.
		rect: Element rectangle in top-left coordinates.
		page_height: Page height in points.
		options: Export options.
		client: Shared client for remote image sources.

	Returns:
		True if the image itself was drawn.
	"""
	if not element.src:
		draw_placeholder(pdf, rect, page_height, error=False)
		return False

	box = gpd.styles.resolve_box_style(element.styles)
	try:
		draw_background(pdf, rect, box, page_height)
		image = await gpd.image_fit.fetch_image_source(element.src, client)
		fit_rect = gpd.image_fit.compute_fit_rect(
			gpd.image_fit.image_ratio(image),
			rect.width,
			rect.height,
			element.fit or DEFAULT_IMAGE_FIT,
		)
		image_reader = build_image_reader(image, options.quality)
		draw_fitted_image(pdf, image_reader, rect, fit_rect, page_height)
		draw_border(pdf, rect, box, page_height)
	except (ImageSourceError, OSError, ValueError) as error:
		logger.warning("Error adding image %s to PDF: %s", element.id, error)
		draw_placeholder(pdf, rect, page_height, error=True)
		return False
	return True


#============================================
def verify_document(data: bytes) -> int:
	"""
	Re-read an assembled document so a broken artifact is never reported as done.

	Args:
		data: PDF bytes.

	Returns:
		Number of pages.
	"""
	if not data:
		raise ExportError("PDF document is empty")
	try:
		reader = pypdf.PdfReader(io.BytesIO(data))
		page_count = len(reader.pages)
	except pypdf.errors.PdfReadError as error:
		raise ExportError(f"Generated PDF is unreadable: {error}") from error
	if page_count != 1:
		raise ExportError(f"Expected a single page, got {page_count}")
	return page_count


#============================================
def estimate_page_size(layout: Layout) -> PageEstimate:
	"""
	Estimate the exported page size.

	Args:
		layout: Layout to estimate.

	Returns:
		PageEstimate with sizes like "595pt".
	"""
	page_width, page_height = gpd.geometry.oriented_page_size(layout.grid)
	return PageEstimate(
		width=gpd.units.format_points(page_width),
		height=gpd.units.format_points(page_height),
		elements=len(layout.elements),
	)


#============================================
async def render_layout(
	snapshot: Layout,
	options: ExportOptions,
	dispatcher: ProgressDispatcher,
) -> ExportResult:
	"""
	Run the pipeline stages over a layout snapshot.

	Args:
		snapshot: Layout copy that nothing else mutates.
		options: Export options.
		dispatcher: Progress dispatcher.

	Returns:
		ExportResult.
	"""
	dispatcher.emit(ExportProgress(stage=STAGE_PREPARING, progress=0, message="Preparing PDF document..."))
	grid = snapshot.grid
	if not gpd.layout_state.grid_config_valid(grid):
		raise ExportError(f"Invalid grid configuration: {grid.columns}x{grid.rows} gap {grid.gap}")
	page_width, page_height = gpd.geometry.oriented_page_size(grid)
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(
		buffer,
		pagesize=(page_width, page_height),
		pageCompression=1 if options.compression else 0,
		invariant=1,
	)
	pdf.setTitle(options.filename)
	logger.debug("Page %.2f x %.2f pt, %d elements", page_width, page_height, len(snapshot.elements))

	total = len(snapshot.elements)
	if total == 0:
		dispatcher.emit(
			ExportProgress(
				stage=STAGE_PROCESSING_ELEMENTS,
				progress=20,
				message="Processing layout elements...",
				total_elements=0,
			)
		)
	placeholder_count = 0
	async with httpx.AsyncClient(timeout=IMAGE_FETCH_TIMEOUT) as client:
		for index, element in enumerate(snapshot.elements):
			dispatcher.emit(
				ExportProgress(
					stage=STAGE_PROCESSING_ELEMENTS,
					progress=20 + (index / total) * 50,
					message=f"Processing element {index + 1} of {total}...",
					element_index=index,
					total_elements=total,
				)
			)
			rect = gpd.geometry.element_rect(grid, (page_width, page_height), element.grid_position)
			if element.type == "text":
				draw_text_element(pdf, element, rect, page_height)
			elif element.type == "image":
				drawn = await draw_image_element(pdf, element, rect, page_height, options, client)
				if not drawn:
					placeholder_count += 1
			else:
				logger.warning("Skipping element %s with unknown type %r", element.id, element.type)

	dispatcher.emit(ExportProgress(stage=STAGE_PROCESSING_IMAGES, progress=80, message="Optimizing images..."))
	dispatcher.emit(ExportProgress(stage=STAGE_FINALIZING, progress=90, message="Finalizing PDF..."))
	pdf.showPage()
	pdf.save()
	data = buffer.getvalue()
	verify_document(data)

	dispatcher.emit(ExportProgress(stage=STAGE_COMPLETE, progress=100, message="PDF exported successfully!"))
	return ExportResult(
		filename=options.filename,
		data=data,
		page_width=page_width,
		page_height=page_height,
		element_count=total,
		placeholder_count=placeholder_count,
	)


#============================================
async def export_document(
	layout: Layout,
	options: ExportOptions | None = None,
	on_progress: ProgressCallback | None = None,
) -> ExportResult:
	"""
	Export a layout to a PDF document.

	The layout is deep-copied first, so later edits do not affect an
	export in flight. Bad images become placeholders; any other failure
	aborts the export with ExportError.

	Args:
		layout: Layout to export.
		options: Export options, defaults when None.
		on_progress: Optional observer for ExportProgress events.

	Returns:
		ExportResult holding the PDF bytes.
	"""
	if options is None:
		options = ExportOptions()
	dispatcher = ProgressDispatcher(on_progress, asyncio.get_running_loop())
	try:
		snapshot = copy.deepcopy(layout)
		result = await render_layout(snapshot, options, dispatcher)
	except ExportError:
		raise
	except Exception as error:
		logger.error("Error generating PDF: %s", error)
		raise ExportError(f"Failed to generate PDF: {error}") from error
	finally:
		await dispatcher.flush()
	return result


#============================================
def export_document_sync(
	layout: Layout,
	options: ExportOptions | None = None,
	on_progress: ProgressCallback | None = None,
) -> ExportResult:
	"""
	Run export_document to completion from synchronous code.
	"""
	return asyncio.run(export_document(layout, options, on_progress))


#============================================
def write_document(result: ExportResult, directory: pathlib.Path) -> pathlib.Path:
	"""
	Write an exported document into a directory.

	Args:
		result: Export result.
		directory: Output directory.

	Returns:
		Path of the written file.
	"""
	directory.mkdir(parents=True, exist_ok=True)
	output_path = directory / result.filename
	output_path.write_bytes(result.data)
	return output_path
