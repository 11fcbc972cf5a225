"""Generic TypeScript source document builder.

A ``SourceDocument`` is an ordered tree of imports, declarations and a
default export with a ``render`` operation. Writers build documents instead
of concatenating strings so every artifact shares the same layout:

    imports
    <blank line>
    declaration;
    <blank line>
    export default expression;
"""

import json
import re
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

__all__ = [
    'CodeWriter',
    'Declaration',
    'ImportCollector',
    'SourceDocument',
    'property_key',
    'string_literal',
    'template_literal',
]

INDENT = '  '

_IDENTIFIER = re.compile(r'^[A-Za-z_$][A-Za-z0-9_$]*$')


def string_literal(value: str) -> str:
    """Render a double-quoted TypeScript string literal."""
    return json.dumps(value, ensure_ascii=False)


def template_literal(value: str) -> str:
    """Render a template literal, keeping ``${...}`` interpolations intact."""
    escaped = value.replace('\\', '\\\\').replace('`', '\\`')
    return f'`{escaped}`'


def property_key(name: str) -> str:
    """Render an object literal key, quoting it when it is not an identifier."""
    return name if _IDENTIFIER.match(name) else string_literal(name)


class CodeWriter:
    """Accumulates lines of source text with block indentation.

    ``write`` appends to the current line, ``line`` terminates it. Blocks
    indent everything written inside them by one level.

    Example:
        >>> writer = CodeWriter()
        >>> with writer.block('inputs: {', '},'):
        ...     writer.line('a,')
        >>> writer.text()
        'inputs: {\\n  a,\\n},'
    """

    def __init__(self, indent: str = INDENT):
        self._indent = indent
        self._level = 0
        self._lines: list[str] = []
        self._current: str | None = None

    def write(self, text: str) -> 'CodeWriter':
        if self._current is None:
            self._current = self._indent * self._level
        self._current += text
        return self

    def line(self, text: str = '') -> 'CodeWriter':
        if text:
            self.write(text)
        self._lines.append((self._current or '').rstrip())
        self._current = None
        return self

    def blank_line(self) -> 'CodeWriter':
        """Add an empty line unless the last line already is one."""
        if self._current is not None:
            self.line()
        if self._lines and self._lines[-1] != '':
            self._lines.append('')
        return self

    @contextmanager
    def indented(self) -> Iterator['CodeWriter']:
        self._level += 1
        try:
            yield self
        finally:
            self._level -= 1

    @contextmanager
    def block(self, opener: str, closer: str) -> Iterator['CodeWriter']:
        """Write ``opener``, an indented body and ``closer`` on separate lines."""
        self.line(opener)
        with self.indented():
            yield self
        self.line(closer)

    def text(self) -> str:
        lines = list(self._lines)
        if self._current is not None:
            lines.append(self._current.rstrip())
        return '\n'.join(lines)


class ImportCollector:
    """Collects named and default imports per module specifier.

    Modules render in the order they were first added, so callers control
    grouping; names within a module are sorted for stable output.
    """

    def __init__(self):
        self._named: dict[str, set[str]] = {}
        self._default: dict[str, str] = {}
        self._order: list[str] = []

    def _register(self, module: str) -> None:
        if module not in self._order:
            self._order.append(module)

    def add_named(self, module: str, *names: str) -> None:
        """Add named imports, e.g. ``add_named('./client', 'baseUrl')``."""
        if not names:
            return
        self._register(module)
        self._named.setdefault(module, set()).update(names)

    def add_default(self, module: str, name: str) -> None:
        self._register(module)
        self._default[module] = name

    def has_imports(self) -> bool:
        return bool(self._order)

    def to_lines(self) -> list[str]:
        lines = []
        for module in self._order:
            clauses = []
            if module in self._default:
                clauses.append(self._default[module])
            names = sorted(self._named.get(module, ()))
            if names:
                clauses.append('{ ' + ', '.join(names) + ' }')
            lines.append(f'import {", ".join(clauses)} from {string_literal(module)};')
        return lines


Initializer = Callable[[CodeWriter], None]


@dataclass
class Declaration:
    """A top-level ``const`` declaration.

    Attributes:
        name: The declared identifier.
        initializer: Source text, or a callable writing it to a CodeWriter.
        exported: Whether the declaration is prefixed with ``export``.
        annotation: Optional TypeScript type annotation.
    """

    name: str
    initializer: str | Initializer
    exported: bool = False
    annotation: str | None = None

    def render(self) -> str:
        prefix = 'export const' if self.exported else 'const'
        target = f'{self.name}: {self.annotation}' if self.annotation else self.name
        return f'{prefix} {target} = {_render_expression(self.initializer)};'


def _render_expression(expression: str | Initializer) -> str:
    if isinstance(expression, str):
        return expression
    writer = CodeWriter()
    expression(writer)
    return writer.text()


@dataclass
class SourceDocument:
    """One generated TypeScript file.

    Attributes:
        path: POSIX path of the artifact relative to the output root.
        imports: The file's imports.
        declarations: Top-level declarations, in order.
        default_export: Expression of the ``export default`` statement.
    """

    path: str
    imports: ImportCollector = field(default_factory=ImportCollector)
    declarations: list[Declaration] = field(default_factory=list)
    default_export: str | Initializer | None = None

    def declare(
        self,
        name: str,
        initializer: str | Initializer,
        exported: bool = False,
        annotation: str | None = None,
    ) -> Declaration:
        declaration = Declaration(name, initializer, exported, annotation)
        self.declarations.append(declaration)
        return declaration

    def render(self) -> str:
        sections = []
        if self.imports.has_imports():
            sections.append('\n'.join(self.imports.to_lines()))
        sections.extend(declaration.render() for declaration in self.declarations)
        if self.default_export is not None:
            sections.append(f'export default {_render_expression(self.default_export)};')
        return '\n\n'.join(sections) + '\n'
