from __future__ import annotations

from pathlib import Path


_README_ANCHORS = (
    "Generate TypeScript definitions for GObject-Introspection",
    "Prerequisites",
    "--modules",
    "--gir-directory",
    "--outdir",
    "--environment",
    "--build-type",
    "--print",
    "index.d.ts",
    "cast.ts",
    "pytest",
)


def _tool_root() -> Path:
    return Path(__file__).resolve().parents[2]


def test_required_artifacts_exist() -> None:
    tool_root = _tool_root()
    required_paths = {
        "girgen.py",
        "pyproject.toml",
        "README.md",
        "tests/conftest.py",
        "tests/fixtures/gir/Base-1.0.gir",
        "tests/fixtures/gir/Ext-1.0.gir",
        "tests/fixtures/gir/Broken-1.0.gir",
    }

    missing = sorted(path for path in required_paths if not (tool_root / path).exists())
    assert missing == []


def test_readme_includes_quick_start_and_flags() -> None:
    readme = _tool_root() / "README.md"
    assert readme.exists(), "README.md must exist"
    content = readme.read_text(encoding="utf-8")
    missing = [anchor for anchor in _README_ANCHORS if anchor not in content]
    assert missing == [], f"README.md missing required anchors: {missing}"
