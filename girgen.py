"""TypeScript definition generator for GObject-Introspection libraries.

Reads GObject-Introspection `.gir` metadata and produces one `.d.ts`
declaration file per namespace (plus `.js` shims in library builds) for the
gjs and node-gtk runtimes.

Usage:
    python girgen.py -m Gtk-3.0 -e gjs -o @types
"""

import argparse
import json
import re
import sys
import xml.etree.ElementTree as ET
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, TextIO

DEFAULT_GIR_DIRECTORY = Path("/usr/share/gir-1.0")
DEFAULT_OUTPUT_DIR = Path("@types")
DEFAULT_MODULES: tuple[str, ...] = ("*",)


# ===--- CLI config contracts ---=== #

ENV_GJS = "gjs"
ENV_NODE = "node"
VALID_ENVIRONMENTS = (ENV_GJS, ENV_NODE)

BUILD_TYPE_LIB = "lib"
BUILD_TYPE_TYPES = "types"
VALID_BUILD_TYPES = (BUILD_TYPE_LIB, BUILD_TYPE_TYPES)


@dataclass(frozen=True)
class GenerateConfig:
    modules: tuple[str, ...]
    ignore: frozenset[str]
    gir_directory: Path
    output_dir: Path | None
    environment: str
    build_type: str
    patches_file: Path | None = None
    verbose: bool = False


VALID_ERROR_CODES = {
    "INVALID_ENVIRONMENT",
    "INVALID_BUILD_TYPE",
    "INVALID_MODULE_NAME",
    "PATH_NOT_FOUND",
    "INVALID_PATCH_FILE",
}
_MODULE_NAME_RE = re.compile(r"^[A-Za-z0-9_.*?\[\]-]+$")


class ConfigError(Exception):
    """Invalid command-line input, reported with a code and an optional hint."""

    def __init__(self, code: str, message: str, hint: str | None = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = hint


def validate_module_name(name: str) -> str:
    if _MODULE_NAME_RE.match(name):
        return name
    raise ConfigError(
        "INVALID_MODULE_NAME",
        f"Invalid module name: {name}",
        "Module names look like Gtk-3.0 and may contain * wildcards (for example Gtk-*).",
    )


def require_existing_path(path: Path, flag: str, hint: str) -> Path:
    """Return `path` unchanged, or fail with PATH_NOT_FOUND naming `flag`."""
    if Path(path).exists():
        return path
    raise ConfigError(
        "PATH_NOT_FOUND", f"{flag} {path}: no such file or directory", hint
    )


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate TypeScript definitions for GObject-Introspection modules"
    )

    parser.add_argument("-m", "--modules", action="append", nargs="+", default=None)
    parser.add_argument("-i", "--ignore", action="append", nargs="+", default=None)
    parser.add_argument(
        "-g", "--gir-directory", type=Path, default=DEFAULT_GIR_DIRECTORY
    )

    out_group = parser.add_mutually_exclusive_group()
    out_group.add_argument("-o", "--outdir", type=Path, default=DEFAULT_OUTPUT_DIR)
    out_group.add_argument("--print", action="store_true", default=False)

    parser.add_argument("-e", "--environment", type=str, default=ENV_GJS)
    parser.add_argument("-b", "--build-type", type=str, default=BUILD_TYPE_LIB)
    parser.add_argument("--patches", type=Path, default=None)
    parser.add_argument("-v", "--verbose", action="store_true", default=False)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def normalize_names(raw_names: object, flag: str) -> tuple[str, ...]:
    """Flatten an `action="append", nargs="+"` value into a tuple of names.

    Order is preserved and duplicates are dropped (first occurrence wins).
    """
    if raw_names is None:
        return tuple()
    if not isinstance(raw_names, list):
        raise ConfigError(
            "INVALID_MODULE_NAME",
            f"Invalid {flag} value type: {type(raw_names).__name__}",
            f"Pass module names as {flag} Name-Version.",
        )

    normalized: list[str] = []
    for entry in raw_names:
        names = entry if isinstance(entry, list) else [entry]
        for name in names:
            if not isinstance(name, str):
                raise ConfigError(
                    "INVALID_MODULE_NAME",
                    f"Invalid module name type: {type(name).__name__}",
                    f"Pass module names as {flag} Name-Version.",
                )
            if name not in normalized:
                normalized.append(name)
    return tuple(normalized)


def validate_config(args: argparse.Namespace) -> GenerateConfig:
    if args.environment not in VALID_ENVIRONMENTS:
        raise ConfigError(
            "INVALID_ENVIRONMENT",
            f"Unsupported environment: {args.environment}",
            f"Use one of: {', '.join(VALID_ENVIRONMENTS)}.",
        )
    if args.build_type not in VALID_BUILD_TYPES:
        raise ConfigError(
            "INVALID_BUILD_TYPE",
            f"Unsupported build type: {args.build_type}",
            f"Use one of: {', '.join(VALID_BUILD_TYPES)}.",
        )

    modules = normalize_names(args.modules, "--modules") or DEFAULT_MODULES
    ignore = normalize_names(args.ignore, "--ignore")
    for name in modules + ignore:
        validate_module_name(name)

    gir_directory = require_existing_path(
        args.gir_directory,
        "--gir-directory",
        "Install the introspection data (for example libgtk-3-dev) or pass "
        "--gir-directory /your/path/to/gir-1.0",
    )
    patches_file = None
    if args.patches is not None:
        patches_file = require_existing_path(
            args.patches,
            "--patches",
            'Point --patches at a JSON file such as {"Gtk.Widget.show": ["/* ... */"]}.',
        )

    return GenerateConfig(
        modules=modules,
        ignore=frozenset(ignore),
        gir_directory=gir_directory,
        output_dir=None if args.print else args.outdir,
        environment=args.environment,
        build_type=args.build_type,
        patches_file=patches_file,
        verbose=bool(args.verbose),
    )


def build_config(argv: list[str] | None = None) -> GenerateConfig:
    return validate_config(parse_args(argv))


# ===--- Generation errors ---=== #

VALID_GENERATION_ERROR_CODES = {
    "MISSING_MODULE",
    "PARSE_ERROR",
    "NO_MODULES_REQUESTED",
    "CYCLIC_INHERITANCE",
}
RECOVERABLE_ERROR_CODES = frozenset({"MISSING_MODULE", "PARSE_ERROR"})


class GenerationError(Exception):
    """Failure raised while loading, resolving or emitting modules.

    MISSING_MODULE and PARSE_ERROR are per-module and recoverable: the loader
    records them and carries on. NO_MODULES_REQUESTED and CYCLIC_INHERITANCE
    abort the run.
    """

    def __init__(self, code: str, message: str, module: str | None = None):
        if code not in VALID_GENERATION_ERROR_CODES:
            raise ValueError(f"Unknown generation error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.module = module

    @property
    def recoverable(self) -> bool:
        return self.code in RECOVERABLE_ERROR_CODES


# ===--- Module identity ---=== #


class DependencyRef(NamedTuple):
    name: str
    version: str
    fullname: str


def module_full_name(name: str, version: str) -> str:
    return f"{name}-{version}"


def split_full_name(fullname: str) -> DependencyRef:
    """Split `Name-Version` on its first separator into a DependencyRef."""
    name, _, version = fullname.partition("-")
    return DependencyRef(name=name, version=version, fullname=fullname)


# ===--- Constants ---=== #

GIR_TO_TS = {
    "none": "void",
    "gboolean": "boolean",
    "gchar": "number",
    "guchar": "number",
    "gunichar": "number",
    "gint": "number",
    "guint": "number",
    "gint8": "number",
    "guint8": "number",
    "gint16": "number",
    "guint16": "number",
    "gint32": "number",
    "guint32": "number",
    "gint64": "number",
    "guint64": "number",
    "glong": "number",
    "gulong": "number",
    "gshort": "number",
    "gushort": "number",
    "gsize": "number",
    "gssize": "number",
    "gfloat": "number",
    "gdouble": "number",
    "long double": "number",
    "goffset": "number",
    "gintptr": "number",
    "guintptr": "number",
    "int": "number",
    "double": "number",
    "GType": "number",
    "utf8": "string",
    "filename": "string",
    "gpointer": "object",
    "gconstpointer": "object",
    "va_list": "any",
}

# GLib containers whose element type is the meaningful part.
GIR_LIST_TYPES = {"GLib.List", "GLib.SList", "GLib.PtrArray", "GLib.Array"}

TS_RESERVED = {
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "new",
    "null", "return", "super", "switch", "this", "throw", "true", "try",
    "typeof", "var", "void", "while", "with", "arguments", "eval", "package",
    "private", "protected", "public", "static", "yield", "let", "interface",
    "implements",
}

GIR_CORE_NS = "http://www.gtk.org/introspection/core/1.0"

ENVIRONMENT_DIRS = {ENV_GJS: "Gjs", ENV_NODE: "node-gtk"}


# ===--- Symbol patches ---=== #

SYMBOL_PATCHES: dict[str, tuple[str, ...]] = {
    "Atk.Object.get_description": (
        "/* return type clashes with Atk.Action.get_description */",
        "get_description(): string | null",
    ),
    "Atk.Object.get_name": (
        "/* return type clashes with Atk.Action.get_name */",
        "get_name(): string | null",
    ),
    "Atk.Object.set_description": (
        "/* return type clashes with Atk.Action.set_description */",
        "set_description(description: string): boolean | null",
    ),
    "Gtk.Container.child_notify": (
        "/* child_notify clashes with Gtk.Widget.child_notify */",
    ),
    "Gtk.MenuItem.activate": ("/* activate clashes with Gtk.Widget.activate */",),
    "Gtk.TextView.get_window": (
        "/* get_window clashes with Gtk.Widget.get_window */",
    ),
    "WebKit.WebView.get_settings": (
        "/* get_settings clashes with Gtk.Widget.get_settings */",
    ),
}
"""Override fragments for members whose generated signature collides with an
inherited one. Keyed by `Namespace.Class.method`; the fragments replace the
generated member verbatim, so a comment-only entry removes the member."""


def load_patch_file(path: Path) -> dict[str, tuple[str, ...]]:
    """Load extra symbol patches from a JSON object of `key -> [line, ...]`.

    Raises:
        ConfigError: INVALID_PATCH_FILE when the file is not valid JSON or is
            not an object mapping strings to lists of strings.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as err:
        raise ConfigError(
            "INVALID_PATCH_FILE",
            f"Cannot read patch file {path}: {err}",
            'Patch files are JSON objects: {"Ns.Class.method": ["/* comment */"]}.',
        ) from err

    if not isinstance(raw, dict):
        raise ConfigError(
            "INVALID_PATCH_FILE",
            f"Patch file {path} must contain a JSON object",
            'Patch files are JSON objects: {"Ns.Class.method": ["/* comment */"]}.',
        )

    patches: dict[str, tuple[str, ...]] = {}
    for key, lines in raw.items():
        if not isinstance(lines, list) or not all(isinstance(x, str) for x in lines):
            raise ConfigError(
                "INVALID_PATCH_FILE",
                f"Patch entry {key!r} in {path} must be a list of strings",
                'Patch files are JSON objects: {"Ns.Class.method": ["/* comment */"]}.',
            )
        patches[key] = tuple(lines)
    return patches


def merge_patches(
    base: dict[str, tuple[str, ...]], extra: dict[str, tuple[str, ...]]
) -> dict[str, tuple[str, ...]]:
    merged = dict(base)
    merged.update(extra)
    return merged


# ===--- GIR data classes ---=== #


class GirTypeRef:
    def __init__(
        self,
        name: str | None,
        is_array: bool = False,
        element: "GirTypeRef | None" = None,
    ):
        self.name = name
        self.is_array = is_array
        self.element = element


class GirParameter:
    def __init__(
        self,
        name: str,
        type_ref: GirTypeRef,
        direction: str = "in",
        nullable: bool = False,
        is_varargs: bool = False,
    ):
        self.name = name
        self.type_ref = type_ref
        self.direction = direction
        self.nullable = nullable
        self.is_varargs = is_varargs

    @property
    def ts_name(self) -> str:
        name = self.name.replace("-", "_")
        if name in TS_RESERVED or name[:1].isdigit():
            return "_" + name
        return name


class GirFunction:
    def __init__(
        self,
        name: str,
        kind: str,
        params: list[GirParameter],
        return_type: GirTypeRef,
        return_nullable: bool = False,
    ):
        self.name = name
        self.kind = kind  # "function", "method" or "constructor"
        self.params = params
        self.return_type = return_type
        self.return_nullable = return_nullable


class GirField:
    def __init__(self, name: str, type_ref: GirTypeRef, writable: bool):
        self.name = name
        self.type_ref = type_ref
        self.writable = writable


class GirProperty:
    def __init__(self, name: str, type_ref: GirTypeRef, writable: bool):
        self.name = name
        self.type_ref = type_ref
        self.writable = writable


class GirClass:
    """A class, interface or record (boxed struct) declared by a namespace."""

    def __init__(
        self,
        name: str,
        kind: str,
        parent: str | None = None,
        implements: list[str] | None = None,
        fields: list[GirField] | None = None,
        properties: list[GirProperty] | None = None,
        methods: list[GirFunction] | None = None,
        constructors: list[GirFunction] | None = None,
        functions: list[GirFunction] | None = None,
    ):
        self.name = name
        self.kind = kind  # "class", "interface" or "record"
        self.parent = parent
        self.implements = implements or []
        self.fields = fields or []
        self.properties = properties or []
        self.methods = methods or []
        self.constructors = constructors or []
        self.functions = functions or []


class GirEnum:
    def __init__(self, name: str, members: list[tuple[str, str]], is_bitfield: bool):
        self.name = name
        self.members = members
        self.is_bitfield = is_bitfield


class GirCallback:
    def __init__(self, name: str, signature: GirFunction):
        self.name = name
        self.signature = signature


class GirAlias:
    def __init__(self, name: str, target: GirTypeRef):
        self.name = name
        self.target = target


class GirConstant:
    def __init__(self, name: str, type_ref: GirTypeRef, value: str):
        self.name = name
        self.type_ref = type_ref
        self.value = value


# ===--- GIR parsing ---=== #


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(el: ET.Element, tag: str) -> list[ET.Element]:
    return [child for child in el if _local(child.tag) == tag]


def _child(el: ET.Element, tag: str) -> ET.Element | None:
    for child in el:
        if _local(child.tag) == tag:
            return child
    return None


def _introspectable(el: ET.Element) -> bool:
    return el.get("introspectable", "1") != "0"


def _is_nullable(el: ET.Element) -> bool:
    return el.get("nullable") == "1" or el.get("allow-none") == "1"


def parse_type_ref(el: ET.Element | None) -> GirTypeRef:
    """Read the `<type>` or `<array>` child of a parameter-like element."""
    if el is None:
        return GirTypeRef(None)
    for child in el:
        tag = _local(child.tag)
        if tag == "type":
            inner = _child(child, "type")
            if child.get("name") in GIR_LIST_TYPES and inner is not None:
                return GirTypeRef(
                    child.get("name"), is_array=True, element=parse_type_ref(child)
                )
            return GirTypeRef(child.get("name"))
        if tag == "array":
            return GirTypeRef(
                child.get("name"), is_array=True, element=parse_type_ref(child)
            )
    return GirTypeRef(None)


def parse_function(el: ET.Element, kind: str) -> GirFunction | None:
    name = el.get("name")
    if not name or not _introspectable(el):
        return None

    params: list[GirParameter] = []
    params_el = _child(el, "parameters")
    if params_el is not None:
        for p in _children(params_el, "parameter"):
            p_name = p.get("name") or f"arg{len(params)}"
            if _child(p, "varargs") is not None:
                params.append(
                    GirParameter(p_name, GirTypeRef(None), is_varargs=True)
                )
                continue
            params.append(
                GirParameter(
                    p_name,
                    parse_type_ref(p),
                    direction=p.get("direction", "in"),
                    nullable=_is_nullable(p),
                )
            )

    ret_el = _child(el, "return-value")
    return GirFunction(
        name=name,
        kind=kind,
        params=params,
        return_type=parse_type_ref(ret_el),
        return_nullable=ret_el is not None and _is_nullable(ret_el),
    )


def _parse_functions(el: ET.Element, tag: str, kind: str) -> list[GirFunction]:
    functions = []
    for child in _children(el, tag):
        fn = parse_function(child, kind)
        if fn is not None:
            functions.append(fn)
    return functions


def parse_class(el: ET.Element, kind: str) -> GirClass | None:
    name = el.get("name")
    if not name or not _introspectable(el):
        return None

    fields = [
        GirField(f.get("name", ""), parse_type_ref(f), f.get("writable") == "1")
        for f in _children(el, "field")
        if f.get("name") and f.get("private") != "1" and _introspectable(f)
    ]
    properties = [
        GirProperty(p.get("name", ""), parse_type_ref(p), p.get("writable") == "1")
        for p in _children(el, "property")
        if p.get("name") and _introspectable(p)
    ]
    implements = [
        i.get("name", "") for i in _children(el, "implements") if i.get("name")
    ]

    return GirClass(
        name=name,
        kind=kind,
        parent=el.get("parent"),
        implements=implements,
        fields=fields,
        properties=properties,
        methods=_parse_functions(el, "method", "method"),
        constructors=_parse_functions(el, "constructor", "constructor"),
        functions=_parse_functions(el, "function", "function"),
    )


def parse_enum(el: ET.Element, is_bitfield: bool) -> GirEnum | None:
    name = el.get("name")
    if not name:
        return None
    members = [
        (m.get("name", ""), m.get("value", ""))
        for m in _children(el, "member")
        if m.get("name")
    ]
    return GirEnum(name, members, is_bitfield)


def parse_gir_module(
    root: ET.Element, environment: str, build_type: str
) -> "GirModule":
    """Build a GirModule from a parsed `<repository>` element.

    A repository without a named `<namespace>` yields a module with an empty
    name; the loader discards such modules.
    """
    dependencies = [
        module_full_name(inc.get("name", ""), inc.get("version", ""))
        for inc in _children(root, "include")
        if inc.get("name")
    ]

    module = GirModule(
        name="",
        version="",
        dependencies=dependencies,
        environment=environment,
        build_type=build_type,
    )
    ns = _child(root, "namespace")
    if ns is None or not ns.get("name"):
        return module

    module.name = ns.get("name", "")
    module.version = ns.get("version", "")

    for kind in ("class", "interface", "record"):
        for el in _children(ns, kind):
            cls = parse_class(el, kind)
            if cls is not None:
                module.classes.append(cls)
    for tag, is_bitfield in (("enumeration", False), ("bitfield", True)):
        for el in _children(ns, tag):
            enum = parse_enum(el, is_bitfield)
            if enum is not None:
                module.enums.append(enum)
    module.functions = _parse_functions(ns, "function", "function")
    for el in _children(ns, "callback"):
        sig = parse_function(el, "function")
        if sig is not None:
            module.callbacks.append(GirCallback(sig.name, sig))
    for el in _children(ns, "alias"):
        if el.get("name"):
            module.aliases.append(GirAlias(el.get("name", ""), parse_type_ref(el)))
    for el in _children(ns, "constant"):
        if el.get("name"):
            module.constants.append(
                GirConstant(el.get("name", ""), parse_type_ref(el), el.get("value", ""))
            )
    return module


# ===--- GIR module ---=== #


class GirModule:
    """One loaded introspection namespace and its export operations."""

    def __init__(
        self,
        name: str,
        version: str,
        dependencies: list[str],
        environment: str = ENV_GJS,
        build_type: str = BUILD_TYPE_LIB,
    ):
        self.name = name
        self.version = version
        self.dependencies = dependencies
        self.environment = environment
        self.build_type = build_type
        self.classes: list[GirClass] = []
        self.enums: list[GirEnum] = []
        self.functions: list[GirFunction] = []
        self.callbacks: list[GirCallback] = []
        self.aliases: list[GirAlias] = []
        self.constants: list[GirConstant] = []
        self.patch: dict[str, tuple[str, ...]] = {}
        self.transitive_dependencies: list[str] = []
        self.symbol_table: dict[str, object] = {}
        self.known_modules: frozenset[str] = frozenset()

    @property
    def full_name(self) -> str:
        return module_full_name(self.name, self.version)

    def qualify(self, type_name: str) -> str:
        if "." in type_name:
            return type_name
        return f"{self.name}.{type_name}"

    def load_types(self, symbol_table: dict[str, object]) -> None:
        """Register this namespace's types in the shared symbol table.

        Only adds entries. The table is kept by reference so that references
        into modules loaded later still resolve at export time.
        """
        self.symbol_table = symbol_table
        for entity in (*self.classes, *self.enums, *self.callbacks, *self.aliases):
            symbol_table[self.qualify(entity.name)] = entity

    def load_inheritance(self, inheritance_table: dict[str, list[str]]) -> None:
        for cls in self.classes:
            if cls.kind != "class" or not cls.parent:
                continue
            inheritance_table[self.qualify(cls.name)] = [self.qualify(cls.parent)]

    def export(self, out: TextIO) -> None:
        """Write this module's declarations to `out`."""
        out.write(
            render_template("module.d.ts", {"module": self}).decode("utf-8")
        )

    def export_js(self, output_dir: Path | None) -> "FileWriteResult | None":
        if output_dir is None:
            return None
        return create_from_template(
            "module.js", output_dir, f"{self.full_name}.js", {"module": self}
        )


# ===--- Metadata store ---=== #


class MetadataStore:
    """Locates and parses `<name>.gir` files in one directory."""

    def __init__(
        self,
        gir_directory: Path,
        environment: str = ENV_GJS,
        build_type: str = BUILD_TYPE_LIB,
    ):
        self.gir_directory = Path(gir_directory)
        self.environment = environment
        self.build_type = build_type

    def path_for(self, name: str) -> Path:
        return self.gir_directory / f"{name}.gir"

    def fetch(self, name: str) -> GirModule:
        """Parse the metadata file for `name`.

        Raises:
            GenerationError: MISSING_MODULE when the file does not exist,
                PARSE_ERROR when it cannot be read or is not well-formed GIR.
        """
        path = self.path_for(name)
        if not path.is_file():
            raise GenerationError(
                "MISSING_MODULE",
                f"ENOENT: no such file or directory, open '{path}'",
                module=name,
            )
        try:
            root = ET.parse(path).getroot()
        except (ET.ParseError, OSError, LookupError, ValueError) as err:
            raise GenerationError(
                "PARSE_ERROR", f"Cannot parse {path}: {err}", module=name
            ) from err
        if _local(root.tag) != "repository":
            raise GenerationError(
                "PARSE_ERROR",
                f"Cannot parse {path}: root element is <{_local(root.tag)}>, "
                "expected <repository>",
                module=name,
            )
        return parse_gir_module(root, self.environment, self.build_type)


# ===--- Module loading ---=== #


@dataclass(frozen=True)
class LoadResult:
    """Outcome of a load run.

    Attributes:
        registry: full name -> module, in registration order.
        diagnostics: Recoverable per-module failures, in the order they occurred.
    """

    registry: dict[str, GirModule]
    diagnostics: tuple[GenerationError, ...]


def load_modules(
    store: MetadataStore,
    initial_names: Iterable[str],
    ignore: frozenset[str] = frozenset(),
    verbose: bool = False,
) -> LoadResult:
    """Load the requested modules and everything they depend on.

    Works a FIFO queue seeded with `initial_names`. Newly discovered
    dependencies are pushed onto the front of the queue one by one, so they
    tend to load before their dependents and the last declared loads first.
    A name is never queued twice and is fetched at most once, whatever
    identity its file declares, which bounds the run by the number of
    reachable files.

    Raises:
        GenerationError: NO_MODULES_REQUESTED when `initial_names` is empty.
    """
    queue = deque(name for name in dict.fromkeys(initial_names) if name not in ignore)
    if not queue:
        raise GenerationError(
            "NO_MODULES_REQUESTED", "Need to specify modules via -m!"
        )

    queued: set[str] = set(queue)
    seen: set[str] = set()
    registry: dict[str, GirModule] = {}
    diagnostics: list[GenerationError] = []

    while queue:
        name = queue.popleft()
        queued.discard(name)
        if name in registry or name in seen:
            continue
        seen.add(name)

        if verbose:
            print(f"Parsing {store.path_for(name)}...")
        try:
            module = store.fetch(name)
        except GenerationError as err:
            if not err.recoverable:
                raise
            label = "Warning" if err.code == "MISSING_MODULE" else "Error"
            print(f"{label}: {err.message}", file=sys.stderr)
            diagnostics.append(err)
            continue

        if not module.name:
            continue

        if module.full_name not in registry:
            registry[module.full_name] = module

        for dep in module.dependencies:
            if dep in registry or dep in queued or dep in seen or dep in ignore:
                continue
            queue.appendleft(dep)
            queued.add(dep)

    return LoadResult(registry=registry, diagnostics=tuple(diagnostics))


def topo_sort_modules(registry: dict[str, GirModule]) -> dict[str, GirModule]:
    """Return the registry reordered so dependencies precede dependents.

    Dependencies that are not registered are ignored. Ready modules are taken
    in full-name order. Modules caught in a dependency cycle are appended
    afterwards in their original order.
    """
    deps = {
        key: {d for d in module.dependencies if d in registry and d != key}
        for key, module in registry.items()
    }
    in_degree = {key: len(dd) for key, dd in deps.items()}
    dependents: dict[str, list[str]] = {key: [] for key in registry}
    for key, dd in deps.items():
        for d in dd:
            dependents[d].append(key)

    ready = sorted(key for key, n in in_degree.items() if n == 0)
    ordered: list[str] = []
    while ready:
        key = ready.pop(0)
        ordered.append(key)
        for dependent in dependents[key]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                ready.append(dependent)
        ready.sort()

    placed = set(ordered)
    ordered.extend(key for key in registry if key not in placed)
    return {key: registry[key] for key in ordered}


# ===--- Symbol resolution ---=== #


def resolve_symbols(registry: dict[str, GirModule]) -> dict[str, object]:
    symbol_table: dict[str, object] = {}
    for module in registry.values():
        module.load_types(symbol_table)
    return symbol_table


# ===--- Inheritance ---=== #


def build_inheritance_table(registry: dict[str, GirModule]) -> dict[str, list[str]]:
    inheritance_table: dict[str, list[str]] = {}
    for module in registry.values():
        module.load_inheritance(inheritance_table)
    return inheritance_table


def flatten_inheritance(
    inheritance_table: dict[str, list[str]],
) -> dict[str, list[str]]:
    """Extend every entry in place with its complete first-parent chain.

    For `C -> [P0]` the walk appends P0's first parent, then that name's
    first parent, and so on until a name with no recorded parent. First
    parents are snapshotted before the walk so entries extended earlier do
    not influence later ones.

    Raises:
        GenerationError: CYCLIC_INHERITANCE when a chain revisits a name.
    """
    first_parent = {
        name: parents[0] for name, parents in inheritance_table.items() if parents
    }

    for cls_name, parents in inheritance_table.items():
        if not parents:
            continue
        chain = [cls_name, parents[0]]
        visited = {cls_name}
        cursor = parents[0]
        while True:
            if cursor in visited:
                raise GenerationError(
                    "CYCLIC_INHERITANCE",
                    f"Cyclic inheritance: {' -> '.join(chain)}",
                )
            visited.add(cursor)
            parent = first_parent.get(cursor)
            if parent is None:
                break
            parents.append(parent)
            chain.append(parent)
            cursor = parent

    return inheritance_table


# ===--- Dependency closure ---=== #


def build_dependency_map(
    registry: dict[str, GirModule],
) -> dict[str, list[DependencyRef]]:
    return {
        module.full_name: [split_full_name(dep) for dep in module.dependencies or []]
        for module in registry.values()
    }


def transitive_dependencies(
    full_name: str, dep_map: dict[str, list[DependencyRef]]
) -> frozenset[str]:
    """Return every full name reachable from `full_name`'s direct dependencies.

    Depth-first; names already collected are not traversed again, so diamonds
    and cycles terminate. Modules without an entry contribute nothing.
    """
    result: set[str] = set()
    stack = list(reversed(dep_map.get(full_name) or []))
    while stack:
        dep = stack.pop()
        if dep.fullname in result:
            continue
        result.add(dep.fullname)
        stack.extend(reversed(dep_map.get(dep.fullname) or []))
    return frozenset(result)


def annotate_transitive_dependencies(
    registry: dict[str, GirModule], dep_map: dict[str, list[DependencyRef]]
) -> None:
    for module in registry.values():
        module.transitive_dependencies = sorted(
            transitive_dependencies(module.full_name, dep_map)
        )


# ===--- TypeScript rendering ---=== #


def ts_type(module: GirModule, type_ref: GirTypeRef) -> str:
    """Map a GIR type reference to a TypeScript type expression.

    Namespace types resolve against the shared symbol table; names that are
    not there (dangling or unsupported) become `any`.
    """
    if type_ref.is_array:
        if type_ref.name in ("GLib.ByteArray", "GLib.Bytes"):
            return "Uint8Array"
        if type_ref.element is None:
            return "any[]"
        inner = ts_type(module, type_ref.element)
        if " " in inner:
            inner = f"({inner})"
        return f"{inner}[]"

    name = type_ref.name
    if name is None:
        return "any"
    if name in GIR_TO_TS:
        return GIR_TO_TS[name]

    qualified = module.qualify(name)
    if qualified not in module.symbol_table:
        return "any"
    namespace, _, short = qualified.partition(".")
    if namespace == module.name:
        return short
    return qualified


def _nullable(ts: str, nullable: bool) -> str:
    if nullable and ts not in ("void", "any"):
        return f"{ts} | null"
    return ts


def format_function_signature(
    module: GirModule,
    fn: GirFunction,
    name: str | None = None,
    returns: str | None = None,
) -> str:
    """Render `name(params): ret`; out parameters fold into the return type."""
    params: list[str] = []
    outs: list[str] = []
    for p in fn.params:
        if p.is_varargs:
            params.append("...args: any[]")
            continue
        ts = _nullable(ts_type(module, p.type_ref), p.nullable)
        if p.direction == "out":
            outs.append(ts)
            continue
        params.append(f"{p.ts_name}: {ts}")

    if returns is not None:
        ret = returns
    else:
        ret = _nullable(ts_type(module, fn.return_type), fn.return_nullable)
    if outs:
        results = ([] if ret == "void" else [ret]) + outs
        ret = results[0] if len(results) == 1 else f"[ {', '.join(results)} ]"
    fn_name = fn.name if name is None else name
    return f"{fn_name}({', '.join(params)}): {ret}"


def _member_name(name: str) -> str:
    name = name.replace("-", "_")
    if name[:1].isdigit():
        return "_" + name
    return name


def format_enum(enum: GirEnum) -> list[str]:
    lines = [f"export enum {enum.name} {{"]
    for member, value in enum.members:
        entry = _member_name(member.upper())
        lines.append(f"    {entry} = {value}," if value else f"    {entry},")
    lines.append("}")
    return lines


def format_class(module: GirModule, cls: GirClass) -> list[str]:
    """Render a class, interface or record declaration with patches applied."""
    qualified = module.qualify(cls.name)
    if cls.kind == "interface":
        header = f"export interface {cls.name}"
    else:
        header = f"export class {cls.name}"
        if cls.parent:
            parent = ts_type(module, GirTypeRef(cls.parent))
            if parent != "any":
                header += f" extends {parent}"
        implemented = [ts_type(module, GirTypeRef(i)) for i in cls.implements]
        implemented = [i for i in implemented if i != "any"]
        if implemented:
            header += f" implements {', '.join(implemented)}"

    lines = [header + " {"]
    for label, members in (("Properties", cls.properties), ("Fields", cls.fields)):
        if not members:
            continue
        lines.append(f"    /* {label} of {qualified} */")
        for member in members:
            readonly = "" if member.writable else "readonly "
            ts = ts_type(module, member.type_ref)
            lines.append(f"    {readonly}{_member_name(member.name)}: {ts}")
    if cls.methods:
        lines.append(f"    /* Methods of {qualified} */")
        for method in cls.methods:
            patch = module.patch.get(f"{qualified}.{method.name}")
            if patch is not None:
                lines.extend(f"    {fragment}" for fragment in patch)
                continue
            lines.append(f"    {format_function_signature(module, method)}")
    if cls.kind != "interface" and (cls.constructors or cls.functions):
        lines.append("    /* Static methods and pseudo-constructors */")
        for ctor in cls.constructors:
            sig = format_function_signature(module, ctor, returns=cls.name)
            lines.append(f"    static {sig}")
        for fn in cls.functions:
            lines.append(f"    static {format_function_signature(module, fn)}")
    lines.append("}")
    return lines


def _import_lines(module: GirModule) -> list[str]:
    lines = []
    for dep in module.transitive_dependencies:
        if dep == module.full_name or dep not in module.known_modules:
            continue
        ref = split_full_name(dep)
        lines.append(f"import * as {ref.name} from './{dep}';")
    return lines


def template_module_dts(data: dict) -> list[str]:
    module: GirModule = data["module"]
    lines = [
        "/**",
        f" * {module.full_name}",
        " *",
        f" * Generated by girgen for {module.environment}. Do not edit by hand.",
        " */",
    ]
    imports = _import_lines(module)
    if imports:
        lines.append("")
        lines.extend(imports)

    blocks: list[list[str]] = []
    for const in module.constants:
        blocks.append([f"export const {const.name}: {ts_type(module, const.type_ref)}"])
    for alias in module.aliases:
        blocks.append([f"export type {alias.name} = {ts_type(module, alias.target)}"])
    for enum in module.enums:
        blocks.append(format_enum(enum))
    for fn in module.functions:
        blocks.append([f"export function {format_function_signature(module, fn)}"])
    for cb in module.callbacks:
        sig = format_function_signature(module, cb.signature, "")
        blocks.append([f"export interface {cb.name} {{", f"    {sig}", "}"])
    for cls in module.classes:
        blocks.append(format_class(module, cls))

    for block in blocks:
        lines.append("")
        lines.extend(block)
    return lines


def template_module_js(data: dict) -> list[str]:
    module: GirModule = data["module"]
    if module.environment == ENV_NODE:
        return [
            "const gi = require('node-gtk')",
            f"module.exports = gi.require('{module.name}', '{module.version}')",
        ]
    return [
        f"imports.gi.versions.{module.name} = '{module.version}'",
        f"module.exports = imports.gi.{module.name}",
    ]


def index_entries(modules: Iterable[GirModule]) -> list[tuple[str, str, GirModule]]:
    """Return `(alias, export_name, module)` rows sorted by full name.

    The alias is unique per module; the first version of a namespace is also
    exported under the bare namespace name.
    """
    rows: list[tuple[str, str, GirModule]] = []
    exported: set[str] = set()
    for module in sorted(modules, key=lambda m: m.full_name):
        alias = re.sub(r"\W", "", f"{module.name}{module.version}")
        export_name = module.name if module.name not in exported else alias
        exported.add(export_name)
        rows.append((alias, export_name, module))
    return rows


def template_index_dts(data: dict) -> list[str]:
    rows = index_entries(data["modules"])
    lines = [f"import * as {alias} from './{m.full_name}';" for alias, _, m in rows]
    lines.append("")
    lines.append("export {")
    lines.extend(f"    {alias} as {name}," for alias, name, _ in rows)
    lines.append("};")
    return lines


def template_node_index_js(data: dict) -> list[str]:
    rows = index_entries(data["modules"])
    lines = ["module.exports = {"]
    lines.extend(
        f"    get {name}() {{ return require('./{m.full_name}.js') }},"
        for _, name, m in rows
    )
    lines.append("}")
    return lines


def template_gjs_index_js(data: dict) -> list[str]:
    rows = index_entries(data["modules"])
    lines = ["module.exports = {"]
    lines.extend(
        f"    {name}: require('./{m.full_name}.js'),"
        for _, name, m in rows
    )
    lines.append("}")
    return lines


def template_gjs_dts(data: dict) -> list[str]:
    rows = index_entries(data["modules"])
    lines = [f"import * as {alias} from './{m.full_name}';" for alias, _, m in rows]
    if lines:
        lines.append("")
    lines.extend(
        [
            "declare global {",
            "    function print(...args: any[]): void",
            "    function printerr(...args: any[]): void",
            "    function log(message: any): void",
            "    function logError(exception: object, message?: any): void",
            "    const imports: {",
            "        gi: {",
        ]
    )
    lines.extend(f"            {name}: typeof {alias}" for alias, name, _ in rows)
    lines.extend(
        [
            "            versions: { [namespace: string]: string }",
            "        }",
            "        [key: string]: any",
            "    }",
            "}",
            "",
            "export {}",
        ]
    )
    return lines


def template_gjs_js(data: dict) -> list[str]:
    return ["module.exports = { print, printerr, log, logError, imports }"]


def template_cast_ts(data: dict) -> list[str]:
    table: dict[str, list[str]] = data["inheritance_table"]
    lines = ["const inheritanceTable: { [className: string]: string[] } = {"]
    for key in data["inheritance_table_keys"]:
        ancestors = ", ".join(f"'{a}'" for a in table.get(key, []))
        lines.append(f"    '{key}': [{ancestors}],")
    lines.extend(
        [
            "}",
            "",
            "export function isA(className: string, ancestor: string): boolean {",
            "    if (className === ancestor) return true",
            "    return (inheritanceTable[className] || []).indexOf(ancestor) >= 0",
            "}",
            "",
            "export function giCast<T>(obj: any, className: string, target: string): T {",
            "    if (!isA(className, target)) {",
            "        throw new TypeError(`${className} cannot be cast to ${target}`)",
            "    }",
            "    return obj as T",
            "}",
        ]
    )
    return lines


TEMPLATES: dict[str, Callable[[dict], list[str]]] = {
    "module.d.ts": template_module_dts,
    "module.js": template_module_js,
    "node/index.d.ts": template_index_dts,
    "node/index.js": template_node_index_js,
    "gjs/Gjs.d.ts": template_gjs_dts,
    "gjs/Gjs.js": template_gjs_js,
    "gjs/index.d.ts": template_index_dts,
    "gjs/index.js": template_gjs_index_js,
    "gjs/cast.ts": template_cast_ts,
}


def render_template(template_name: str, data: dict) -> bytes:
    """Render a named template to UTF-8 bytes with a trailing newline.

    Raises:
        KeyError: If no template is registered under template_name.
    """
    lines = TEMPLATES[template_name](data)
    return ("\n".join(lines) + "\n").encode("utf-8")


# ===--- Writer ---=== #


@dataclass(frozen=True)
class FileWriteResult:
    """Result of writing a single generated file.

    Attributes:
        filename: Filename written, e.g. "Gtk-3.0.d.ts" or "index.d.ts".
        path: Absolute path of the written file.
        line_count: Number of newline characters in the written content.
        byte_count: Number of bytes written.
    """

    filename: str
    path: Path
    line_count: int
    byte_count: int


def write_file(output_dir: Path, filename: str, content: bytes) -> FileWriteResult:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    file_path = output_dir / filename
    file_path.write_bytes(content)
    return FileWriteResult(
        filename=filename,
        path=file_path.resolve(),
        line_count=content.count(b"\n"),
        byte_count=len(content),
    )


def create_from_template(
    template_name: str, output_dir: Path, filename: str, data: dict
) -> FileWriteResult:
    return write_file(output_dir, filename, render_template(template_name, data))


# ===--- Emission ---=== #


def environment_dir(environment: str, output_dir: Path) -> Path:
    """Return the per-environment directory under output_dir."""
    output_dir = Path(output_dir)
    sub = ENVIRONMENT_DIRS[environment]
    if output_dir.name == sub:
        return output_dir
    return output_dir / sub


def export_module_declarations(output_dir: Path, module: GirModule) -> FileWriteResult:
    """Write `<fullName>.d.ts` through the module's own export step."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{module.full_name}.d.ts"
    file_path = output_dir / filename
    with file_path.open("w", encoding="utf-8", newline="\n") as fh:
        module.export(fh)
    resolved = file_path.resolve()
    file_bytes = resolved.read_bytes()
    return FileWriteResult(
        filename=filename,
        path=resolved,
        line_count=file_bytes.count(b"\n"),
        byte_count=len(file_bytes),
    )


def export_node_index(
    output_dir: Path | None, modules: list[GirModule], build_type: str
) -> list[FileWriteResult]:
    if output_dir is None:
        return []
    data = {"modules": modules, "environment": ENV_NODE, "build_type": build_type}
    files = [create_from_template("node/index.d.ts", output_dir, "index.d.ts", data)]
    if build_type == BUILD_TYPE_LIB:
        files.append(
            create_from_template("node/index.js", output_dir, "index.js", data)
        )
    return files


def export_gjs_index(
    output_dir: Path | None, modules: list[GirModule], build_type: str
) -> list[FileWriteResult]:
    if output_dir is None:
        return []
    data = {"modules": modules, "environment": ENV_GJS, "build_type": build_type}
    files = [
        create_from_template("gjs/Gjs.d.ts", output_dir, "Gjs.d.ts", data),
        create_from_template("gjs/index.d.ts", output_dir, "index.d.ts", data),
    ]
    if build_type == BUILD_TYPE_LIB:
        files.append(create_from_template("gjs/index.js", output_dir, "index.js", data))
        files.append(create_from_template("gjs/Gjs.js", output_dir, "Gjs.js", data))
    return files


def export_gjs_cast_lib(
    output_dir: Path | None, inheritance_table: dict[str, list[str]], build_type: str
) -> FileWriteResult | None:
    if output_dir is None:
        return None
    data = {
        "inheritance_table_keys": list(inheritance_table),
        "inheritance_table": inheritance_table,
        "build_type": build_type,
    }
    return create_from_template("gjs/cast.ts", output_dir, "cast.ts", data)


def emit_modules(
    registry: dict[str, GirModule],
    inheritance_table: dict[str, list[str]],
    patches: dict[str, tuple[str, ...]],
    config: GenerateConfig,
    out: TextIO | None = None,
) -> tuple[FileWriteResult, ...]:
    """Write per-module declarations (and shims) plus environment extras.

    With no output directory, declarations go to `out` (stdout by default)
    and nothing else is written.
    """
    env_dir = (
        environment_dir(config.environment, config.output_dir)
        if config.output_dir is not None
        else None
    )
    known = frozenset(registry)
    log_stream = sys.stdout if env_dir is not None else sys.stderr
    files: list[FileWriteResult] = []

    for full_name, module in registry.items():
        if config.verbose:
            print(f" - {full_name} ...", file=log_stream)
        module.patch = patches
        module.known_modules = known
        if env_dir is None:
            module.export(out or sys.stdout)
        else:
            files.append(export_module_declarations(env_dir, module))
        if config.build_type == BUILD_TYPE_LIB:
            result = module.export_js(env_dir)
            if result is not None:
                files.append(result)

    modules = list(registry.values())
    if config.environment == ENV_NODE:
        files.extend(export_node_index(env_dir, modules, config.build_type))
    elif config.environment == ENV_GJS:
        files.extend(export_gjs_index(env_dir, modules, config.build_type))
        cast = export_gjs_cast_lib(env_dir, inheritance_table, config.build_type)
        if cast is not None:
            files.append(cast)

    return tuple(files)


# ===--- Pipeline ---=== #


def expand_module_names(
    names: Iterable[str], gir_directory: Path, ignore: frozenset[str] = frozenset()
) -> tuple[str, ...]:
    """Expand wildcard module names against `<gir_directory>/*.gir`.

    Plain names pass through untouched (a missing file is reported later by
    the loader). Wildcards with no match expand to nothing. Ignored names
    are removed.
    """
    expanded: list[str] = []
    for name in names:
        if any(ch in name for ch in "*?["):
            matches = sorted(p.stem for p in Path(gir_directory).glob(f"{name}.gir"))
        else:
            matches = [name]
        for match in matches:
            if match not in ignore and match not in expanded:
                expanded.append(match)
    return tuple(expanded)


@dataclass(frozen=True)
class GenerationResult:
    """Everything a generation run produced.

    Attributes:
        registry: Loaded modules in emission order.
        diagnostics: Recoverable per-module load failures.
        inheritance_table: Flattened inheritance table.
        files: Files written, per-module files first, then environment extras.
    """

    registry: dict[str, GirModule]
    diagnostics: tuple[GenerationError, ...]
    inheritance_table: dict[str, list[str]]
    files: tuple[FileWriteResult, ...]


def run_generate(config: GenerateConfig, out: TextIO | None = None) -> GenerationResult:
    """Execute the complete generation pipeline for a GenerateConfig.

    Raises:
        GenerationError: NO_MODULES_REQUESTED or CYCLIC_INHERITANCE.
        ConfigError: INVALID_PATCH_FILE from the patches file.
        OSError: Filesystem write failure.
    """
    # Progress goes to stderr when declarations are streamed to stdout.
    log_stream = sys.stderr if config.output_dir is None else sys.stdout
    print(
        f"Start to generate .d.ts files for '{config.environment}' "
        f"as '{config.build_type}'.",
        file=log_stream,
    )

    patches = SYMBOL_PATCHES
    if config.patches_file is not None:
        patches = merge_patches(SYMBOL_PATCHES, load_patch_file(config.patches_file))

    names = expand_module_names(config.modules, config.gir_directory, config.ignore)
    store = MetadataStore(config.gir_directory, config.environment, config.build_type)
    loaded = load_modules(store, names, ignore=config.ignore, verbose=config.verbose)
    registry = topo_sort_modules(loaded.registry)
    print(
        f"  Loaded: {len(registry)} modules, {len(loaded.diagnostics)} failed",
        file=log_stream,
    )

    symbol_table = resolve_symbols(registry)
    inheritance_table = flatten_inheritance(build_inheritance_table(registry))
    annotate_transitive_dependencies(registry, build_dependency_map(registry))
    print(
        f"  Types: {len(symbol_table)} symbols, "
        f"{len(inheritance_table)} inheritance entries",
        file=log_stream,
    )

    files = emit_modules(registry, inheritance_table, patches, config, out=out)
    return GenerationResult(
        registry=registry,
        diagnostics=loaded.diagnostics,
        inheritance_table=inheritance_table,
        files=files,
    )


# ===--- Summary report ---=== #


@dataclass(frozen=True)
class GenerationSummary:
    target_label: str
    output_dir: str
    modules: tuple[str, ...]
    missing: tuple[str, ...]
    failed: tuple[str, ...]
    files: tuple[FileWriteResult, ...]


def build_generation_summary(
    config: GenerateConfig, result: GenerationResult
) -> GenerationSummary:
    output_dir = (
        str(environment_dir(config.environment, config.output_dir))
        if config.output_dir is not None
        else "<stdout>"
    )
    return GenerationSummary(
        target_label=f"{config.environment} ({config.build_type})",
        output_dir=output_dir,
        modules=tuple(result.registry),
        missing=tuple(
            d.module or "" for d in result.diagnostics if d.code == "MISSING_MODULE"
        ),
        failed=tuple(
            d.module or "" for d in result.diagnostics if d.code == "PARSE_ERROR"
        ),
        files=result.files,
    )


def format_generation_summary(summary: GenerationSummary) -> str:
    """Render a GenerationSummary as a console report ending in one newline."""
    lines: list[str] = ["Definitions generated:", ""]
    lines.append(f"  Target:     {summary.target_label}")
    lines.append(f"  Output:     {summary.output_dir}")
    lines.append(f"  Modules:    {len(summary.modules)}")
    if summary.missing:
        lines.append(f"  Missing:    {', '.join(summary.missing)}")
    if summary.failed:
        lines.append(f"  Failed:     {', '.join(summary.failed)}")

    if summary.files:
        lines.append("")
        lines.append("  Files written:")
        for file_result in summary.files:
            line_str = f"{file_result.line_count:>6,} lines"
            lines.append(f"    {file_result.filename:<28} {line_str}")
        total_lines = sum(f.line_count for f in summary.files)
        lines.append("")
        lines.append(
            f"  Total: {total_lines:,} lines across {len(summary.files)} files"
        )
    lines.append("")
    return "\n".join(lines)


def print_generation_summary(
    summary: GenerationSummary, file: TextIO | None = None
) -> None:
    print(format_generation_summary(summary), end="", file=file)


# ===--- Main generation ---=== #


def main(argv: list[str] | None = None):
    try:
        config = build_config(argv)
    except ConfigError as err:
        print(f"Config error [{err.code}]: {err.message}")
        if err.suggestion:
            print(f"Hint: {err.suggestion}")
        raise SystemExit(1) from err

    try:
        result = run_generate(config)
    except ConfigError as err:
        print(f"Config error [{err.code}]: {err.message}", file=sys.stderr)
        raise SystemExit(1) from err
    except GenerationError as err:
        print(f"Error [{err.code}]: {err.message}", file=sys.stderr)
        raise SystemExit(1) from err
    except OSError as err:
        print(f"Error: {err}", file=sys.stderr)
        raise SystemExit(1) from err

    summary_stream = sys.stderr if config.output_dir is None else sys.stdout
    summary = build_generation_summary(config, result)
    print_generation_summary(summary, file=summary_stream)
    print("Done.", file=summary_stream)


if __name__ == "__main__":
    main()
