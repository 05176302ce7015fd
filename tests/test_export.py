import asyncio
import copy
import io
import pathlib

import pypdf
import pytest
import reportlab.pdfgen.canvas

import grid_pdf_designer.catalog as catalog
import grid_pdf_designer.config as config
import grid_pdf_designer.export as export
import grid_pdf_designer.layout_state as layout_state
import grid_pdf_designer.models as models


#============================================
def hello_layout() -> models.Layout:
	"""
	One text element spanning the first row of a 12x8 A4 portrait grid.
	"""
	engine = layout_state.LayoutEngine()
	element = engine.place(catalog.get_template("text"), 1, 1)
	engine.resize(element.id, 12, 1)
	engine.update_element(element.id, models.ContentUpdate("Hello"))
	return engine.snapshot()


#============================================
def image_layout(src: str | None) -> models.Layout:
	engine = layout_state.LayoutEngine()
	element = engine.place(catalog.get_template("image"), 2, 2)
	engine.resize(element.id, 4, 3)
	engine.update_element(element.id, models.SourceUpdate(src))
	return engine.snapshot()


#============================================
def page_text(data: bytes) -> str:
	reader = pypdf.PdfReader(io.BytesIO(data))
	assert len(reader.pages) == 1
	return reader.pages[0].extract_text()


#============================================
def test_end_to_end_hello_export() -> None:
	"""
	The export walks all five stages in order and produces a PDF.
	"""
	events: list[config.ExportProgress] = []
	result = asyncio.run(export.export_document(hello_layout(), None, events.append))

	stages = []
	for event in events:
		if not stages or stages[-1] != event.stage:
			stages.append(event.stage)
	assert tuple(stages) == export.STAGES

	element_events = [event for event in events if event.stage == export.STAGE_PROCESSING_ELEMENTS]
	assert len(element_events) == 1
	assert element_events[0].element_index == 0
	assert element_events[0].total_elements == 1
	assert events[0].progress == 0
	assert events[-1].progress == 100

	assert result.data.startswith(b"%PDF")
	assert result.filename == "layout-design.pdf"
	assert result.page_width == pytest.approx(595.28, abs=0.01)
	assert "Hello" in page_text(result.data)


#============================================
def test_export_without_observer_and_empty_layout() -> None:
	"""
	No observer and no elements is a valid export.
	"""
	result = export.export_document_sync(models.Layout())
	assert result.element_count == 0
	assert len(result.data) > 0


#============================================
def test_empty_layout_reports_processing_stage() -> None:
	events: list[config.ExportProgress] = []
	export.export_document_sync(models.Layout(), None, events.append)
	assert [event.stage for event in events] == list(export.STAGES)


#============================================
def test_landscape_swaps_page_format() -> None:
	layout = hello_layout()
	layout.grid.page.orientation = "landscape"
	result = export.export_document_sync(layout)
	reader = pypdf.PdfReader(io.BytesIO(result.data))
	box = reader.pages[0].mediabox
	assert float(box.width) == pytest.approx(841.89, abs=0.01)
	assert float(box.height) == pytest.approx(595.28, abs=0.01)


#============================================
def test_missing_image_draws_placeholder() -> None:
	result = export.export_document_sync(image_layout(""))
	assert result.placeholder_count == 1
	assert "No Image" in page_text(result.data)


#============================================
def test_broken_image_draws_error_placeholder() -> None:
	"""
	An undecodable image is absorbed as a visible error placeholder.
	"""
	events: list[config.ExportProgress] = []
	result = export.export_document_sync(image_layout("data:image/png;base64,AAAA"), None, events.append)
	assert result.placeholder_count == 1
	assert "Image Error" in page_text(result.data)
	assert events[-1].stage == export.STAGE_COMPLETE


#============================================
def test_image_export_with_quality_and_fit_modes(png_data_uri) -> None:
	for fit in ("cover", "contain", "fill", "stretch"):
		layout = image_layout(png_data_uri(64, 32))
		layout.elements[0].fit = fit
		options = config.ExportOptions(filename="photo.pdf", quality=0.5, compression=False)
		result = export.export_document_sync(layout, options)
		assert result.placeholder_count == 0
		assert result.filename == "photo.pdf"


#============================================
def test_failing_observer_does_not_abort_export() -> None:
	def observer(progress: config.ExportProgress) -> None:
		raise RuntimeError("observer broke")

	result = export.export_document_sync(hello_layout(), None, observer)
	assert result.data.startswith(b"%PDF")


#============================================
def test_unexpected_failure_raises_export_error(monkeypatch: pytest.MonkeyPatch) -> None:
	"""
	Anything other than a per-element image failure aborts the export.
	"""
	def broken_draw(*args, **kwargs) -> int:
		raise RuntimeError("canvas exploded")

	monkeypatch.setattr(export, "draw_text_element", broken_draw)
	events: list[config.ExportProgress] = []
	with pytest.raises(export.ExportError, match="Failed to generate PDF: canvas exploded"):
		export.export_document_sync(hello_layout(), None, events.append)
	assert export.STAGE_COMPLETE not in [event.stage for event in events]


#============================================
def test_export_does_not_mutate_layout() -> None:
	layout = hello_layout()
	before = copy.deepcopy(layout)
	export.export_document_sync(layout)
	assert layout == before


#============================================
def test_text_overflow_lines_dropped_silently() -> None:
	"""
	Lines whose baseline falls past the inner height are not drawn.
	"""
	pdf = reportlab.pdfgen.canvas.Canvas(io.BytesIO(), pagesize=(400.0, 400.0))
	element = models.LayoutElement(
		id="element-overflow",
		type="text",
		grid_position=models.GridPosition(start_col=1, end_col=2, start_row=1, end_row=2),
		content="<p>" + "word " * 80 + "</p>",
	)
	rect = models.Rect(x=0.0, y=0.0, width=200.0, height=60.0)
	lines = export.wrap_text("word " * 80, "Helvetica", 14.0, 184.0)
	assert len(lines) > 2
	assert export.draw_text_element(pdf, element, rect, 400.0) == 2


#============================================
def test_clean_text_content() -> None:
	assert export.clean_text_content("<p>Click to <b>edit</b> text</p>") == "Click to edit text"
	assert export.clean_text_content("Fish &amp; Chips") == "Fish & Chips"
	assert export.clean_text_content("plain") == "plain"


#============================================
def test_estimate_and_write_document(tmp_path: pathlib.Path) -> None:
	layout = hello_layout()
	estimate = export.estimate_page_size(layout)
	assert (estimate.width, estimate.height, estimate.elements) == ("595pt", "842pt", 1)
	result = export.export_document_sync(layout)
	written = export.write_document(result, tmp_path / "out")
	assert written.name == "layout-design.pdf"
	assert written.read_bytes() == result.data


#============================================
def test_local_path_image_draws_error_placeholder(tmp_path: pathlib.Path) -> None:
	"""
	A filesystem path is never read; the element gets the error placeholder.
	"""
	path = tmp_path / "photo.png"
	path.write_bytes(b"not read")
	for src in (str(path), path.as_uri()):
		result = export.export_document_sync(image_layout(src))
		assert result.placeholder_count == 1
		assert "Image Error" in page_text(result.data)


#============================================
def test_invalid_grid_raises_export_error() -> None:
	layout = models.Layout(grid=models.GridConfig(columns=0, rows=8, gap=10))
	events: list[config.ExportProgress] = []
	with pytest.raises(export.ExportError, match="Invalid grid configuration"):
		export.export_document_sync(layout, None, events.append)
	assert [event.stage for event in events] == [export.STAGE_PREPARING]


#============================================
def test_stored_line_height_does_not_change_leading() -> None:
	"""
	Leading stays at 1.2x the font size whatever lineHeight is stored.
	"""
	pdf = reportlab.pdfgen.canvas.Canvas(io.BytesIO(), pagesize=(400.0, 400.0))
	element = models.LayoutElement(
		id="element-tall",
		type="text",
		grid_position=models.GridPosition(start_col=1, end_col=2, start_row=1, end_row=2),
		content="word " * 80,
		styles=models.ElementStyles(line_height=3.0),
	)
	rect = models.Rect(x=0.0, y=0.0, width=200.0, height=60.0)
	assert export.draw_text_element(pdf, element, rect, 400.0) == 2
