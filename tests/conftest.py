import sys
from collections.abc import Callable
from pathlib import Path

import pytest

PROJECT_DIR = Path(__file__).resolve().parent.parent
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

import girgen  # noqa: E402

FIXTURE_GIR_DIR = PROJECT_DIR / "tests" / "fixtures" / "gir"


def _gir_document(
    name: str, version: str, includes: tuple[str, ...], body: str
) -> str:
    refs = [girgen.split_full_name(dep) for dep in includes]
    include_lines = "\n".join(
        f'  <include name="{ref.name}" version="{ref.version}"/>' for ref in refs
    )
    return (
        '<?xml version="1.0"?>\n'
        '<repository version="1.2" '
        'xmlns="http://www.gtk.org/introspection/core/1.0">\n'
        f"{include_lines}\n"
        f'  <namespace name="{name}" version="{version}">\n'
        f"{body}\n"
        "  </namespace>\n"
        "</repository>\n"
    )


@pytest.fixture
def fixture_gir_dir() -> Path:
    return FIXTURE_GIR_DIR


@pytest.fixture
def missing_path(tmp_path: Path) -> Path:
    return tmp_path / "missing"


@pytest.fixture
def gir_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "gir-1.0"
    directory.mkdir()
    return directory


@pytest.fixture
def make_gir() -> Callable[..., str]:
    def _make_gir(
        full_name: str, includes: tuple[str, ...] = (), body: str = ""
    ) -> str:
        name, _, version = full_name.partition("-")
        return _gir_document(name, version, includes, body)

    return _make_gir


@pytest.fixture
def write_gir(gir_dir: Path, make_gir: Callable[..., str]) -> Callable[..., Path]:
    def _write_gir(
        full_name: str, includes: tuple[str, ...] = (), body: str = ""
    ) -> Path:
        path = gir_dir / f"{full_name}.gir"
        path.write_text(make_gir(full_name, includes, body), encoding="utf-8")
        return path

    return _write_gir


@pytest.fixture
def make_module() -> Callable[..., girgen.GirModule]:
    def _make_module(
        full_name: str,
        dependencies: tuple[str, ...] = (),
        classes: tuple[girgen.GirClass, ...] = (),
        environment: str = girgen.ENV_GJS,
        build_type: str = girgen.BUILD_TYPE_LIB,
    ) -> girgen.GirModule:
        name, _, version = full_name.partition("-")
        module = girgen.GirModule(
            name=name,
            version=version,
            dependencies=list(dependencies),
            environment=environment,
            build_type=build_type,
        )
        module.classes.extend(classes)
        return module

    return _make_module


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., girgen.GenerateConfig]:
    def _make_config(**overrides: object) -> girgen.GenerateConfig:
        base: dict[str, object] = {
            "modules": ("Base-1.0",),
            "ignore": frozenset(),
            "gir_directory": FIXTURE_GIR_DIR,
            "output_dir": tmp_path / "out",
            "environment": girgen.ENV_GJS,
            "build_type": girgen.BUILD_TYPE_LIB,
            "patches_file": None,
            "verbose": False,
        }
        base.update(overrides)
        return girgen.GenerateConfig(**base)

    return _make_config
