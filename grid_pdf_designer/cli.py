"""
CLI entry point for exporting layout JSON files to PDF.
"""

# Standard Library
import argparse
import dataclasses
import logging
import pathlib
import time

# local repo modules
import grid_pdf_designer as gpd
import grid_pdf_designer.catalog
import grid_pdf_designer.config
import grid_pdf_designer.export
import grid_pdf_designer.layout_state
import grid_pdf_designer.serialization


ExportOptions = gpd.config.ExportOptions
ExportProgress = gpd.config.ExportProgress

PROGRESS_BAR_WIDTH = gpd.config.PROGRESS_BAR_WIDTH
DEFAULT_FILENAME = gpd.config.DEFAULT_FILENAME
DEFAULT_QUALITY = gpd.config.DEFAULT_QUALITY


#============================================
def print_progress(progress: ExportProgress) -> None:
	"""
	Print a simple progress bar for an export event.

	Args:
		progress: Export progress event.
	"""
	percent = int(round(progress.progress))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	end = "\n" if progress.stage == gpd.export.STAGE_COMPLETE else "\r"
	print(f"Export [{bar}] {percent:3d}% {progress.message:<40}", end=end)


#============================================
def build_options(args: argparse.Namespace) -> ExportOptions:
	"""
	Build export options from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		ExportOptions.
	"""
	output_path = pathlib.Path(args.output_path)
	return ExportOptions(
		filename=output_path.name,
		quality=args.quality,
		compression=args.compression,
	)


#============================================
def apply_page_overrides(engine: gpd.layout_state.LayoutEngine, args: argparse.Namespace) -> None:
	"""
	Apply page size and orientation overrides through the layout engine.

	Args:
		engine: Layout engine holding the loaded layout.
		args: Parsed argparse namespace.
	"""
	if args.page_size is None and args.orientation is None:
		return
	page = dataclasses.replace(engine.grid.page)
	if args.page_size is not None:
		page_size = gpd.catalog.get_page_size(args.page_size)
		if page_size is None:
			names = ", ".join(size.name for size in gpd.catalog.PAGE_SIZES)
			raise SystemExit(f"Unknown page size '{args.page_size}' (choose from: {names})")
		page.width = page_size.width
		page.height = page_size.height
	if args.orientation is not None:
		page.orientation = args.orientation
	grid = dataclasses.replace(engine.grid, page=page)
	if not engine.update_grid(grid):
		raise SystemExit("Page override rejected: grid configuration out of bounds")


#============================================
def parse_args() -> argparse.Namespace:
	"""
	Parse command line arguments.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Export a grid layout JSON file to a PDF document.")
	parser.add_argument("layout_path", help="Layout JSON file.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=DEFAULT_FILENAME, help="Output PDF path.")
	output_group.add_argument("-q", "--quality", dest="quality", type=float, default=DEFAULT_QUALITY, help="Image quality from 0.0 to 1.0.")
	output_group.add_argument("-c", "--compression", dest="compression", action="store_true", help="Compress page streams.")
	output_group.add_argument("-C", "--no-compression", dest="compression", action="store_false", help="Disable page stream compression.")

	page_group = parser.add_argument_group("Page")
	page_group.add_argument("-s", "--page-size", dest="page_size", default=None, help="Override the page size by name (a4, letter, ...).")
	page_group.add_argument("-L", "--landscape", dest="orientation", action="store_const", const="landscape", help="Force landscape orientation.")
	page_group.add_argument("-P", "--portrait", dest="orientation", action="store_const", const="portrait", help="Force portrait orientation.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("-e", "--estimate", dest="estimate", action="store_true", help="Print the page size estimate and exit.")
	behavior_group.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Enable debug logging.")

	parser.set_defaults(
		compression=True,
		orientation=None,
		estimate=False,
		verbose=False,
	)

	args = parser.parse_args()
	return args


#============================================
def run_export(args: argparse.Namespace) -> None:
	"""
	Load a layout, apply overrides and export it.

	Args:
		args: Parsed argparse namespace.
	"""
	layout_path = pathlib.Path(args.layout_path)
	print(f"Layout: {layout_path}")
	start_time = time.perf_counter()
	try:
		layout = gpd.serialization.load_layout(layout_path)
	except gpd.serialization.LayoutFormatError as error:
		raise SystemExit(f"Invalid layout file: {error}")

	context = gpd.layout_state.DesignerContext()
	if not context.engine.load_layout(layout):
		raise SystemExit(f"Invalid layout file: {layout_path} breaks grid bounds, id or overlap rules")
	apply_page_overrides(context.engine, args)
	grid = context.engine.grid
	print(f"Grid: {grid.columns}x{grid.rows} gap {grid.gap}px")
	print(f"Page: {grid.page.width} x {grid.page.height} {grid.page.orientation}")

	estimate = gpd.export.estimate_page_size(context.engine.layout)
	print(f"Estimated PDF size: {estimate.width} x {estimate.height} ({estimate.elements} elements)")
	if args.estimate:
		return

	options = build_options(args)
	output_path = pathlib.Path(args.output_path)
	try:
		result = gpd.export.export_document_sync(context.engine.snapshot(), options, print_progress)
	except gpd.export.ExportError as error:
		raise SystemExit(str(error))
	written = gpd.export.write_document(result, output_path.parent)
	total_time = time.perf_counter() - start_time
	print(f"Placeholders drawn: {result.placeholder_count}")
	print(f"PDF written: {written} ({len(result.data)} bytes)")
	print(f"Timing: total={total_time:.2f}s")


#============================================
def main() -> None:
	"""
	Main entry point.
	"""
	args = parse_args()
	level = logging.DEBUG if args.verbose else logging.WARNING
	logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
	run_export(args)


if __name__ == "__main__":
	main()
