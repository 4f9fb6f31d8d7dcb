"""Tests for the project metadata."""

from pathlib import Path

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


class TestPyproject:

    def setup_method(self):
        self.text = PYPROJECT.read_text()

    def test_no_design_document_as_readme(self):
        assert "SPEC_FULL.md" not in self.text
        assert "readme" not in self.text

    def test_runtime_dependencies(self):
        for name in ("numpy", "pygame", "scipy", "matplotlib"):
            assert f'"{name}"' in self.text
