"""
Pytest configuration for local imports and shared image fixtures.
"""

# Standard Library
import base64
import io
import pathlib
import sys

# PIP3 modules
import PIL.Image
import pytest


#============================================
def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path so grid_pdf_designer imports.
	"""
	repo_root = str(pathlib.Path(__file__).resolve().parent.parent)
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()


#============================================
@pytest.fixture
def png_data_uri():
	"""
	Factory for solid-color PNG data URIs of a given size.
	"""
	def build(width: int, height: int, color: tuple[int, int, int] = (0, 128, 255)) -> str:
		buffer = io.BytesIO()
		PIL.Image.new("RGB", (width, height), color).save(buffer, format="PNG")
		payload = base64.b64encode(buffer.getvalue()).decode("ascii")
		return "data:image/png;base64," + payload

	return build
