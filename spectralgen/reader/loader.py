"""Loading and dereferencing of OpenAPI documents.

This module provides the SchemaLoader, which reads an OpenAPI description from
a URL or file path (JSON or YAML), inlines every ``$ref`` it can resolve and
validates the result into a ``Document``.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterator, NamedTuple
from urllib.parse import urljoin

import httpx
import yaml
from pydantic import ValidationError

from spectralgen.exceptions import (
    SchemaLoadError,
    SchemaValidationError,
    UnsupportedConstructError,
)
from spectralgen.reader.document import Document
from spectralgen.utils import is_url

logger = logging.getLogger(__name__)

__all__ = ['SchemaLoader', 'dereference']

# Schema keywords holding nested schemas, dropped when a cycle is inlined.
NESTED_SCHEMA_KEYS = frozenset(
    {
        '$ref',
        'properties',
        'additionalProperties',
        'patternProperties',
        'items',
        'prefixItems',
        'allOf',
        'oneOf',
        'anyOf',
        'not',
    }
)

COMPOSITION_KEYS = frozenset({'allOf', 'oneOf', 'anyOf'})


class _Scope(NamedTuple):
    cycle: frozenset[str]
    inlined: frozenset[str]
    composing: bool


class SchemaLoader:
    """Loads OpenAPI documents from URLs or file paths and dereferences them.

    Features:
        - Load from URLs (http/https) or local file paths
        - Support for both JSON and YAML formats
        - Local JSON pointer resolution (``#/components/schemas/Pet``)
        - Optional external $ref resolution for URLs and relative files
        - Caching of loaded external documents

    Each reference target is expanded once and the result is shared by every
    reference to it. Inside a recursive schema, a reference that leads back
    into the same cycle is inlined as a copy of its target without nested
    schemas, and a warning is logged; allOf/oneOf/anyOf members are still
    inlined in full once so their properties reach the composing schema.

    Example:
        >>> loader = SchemaLoader()
        >>> document = loader.load('./openapi.yaml')
        >>> document.info.title
        'Petstore'
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        resolve_external_refs: bool = True,
    ):
        """Initialize the schema loader.

        Args:
            http_client: Optional HTTP client to use for URL requests.
                        If not provided, httpx.get is used.
            resolve_external_refs: Whether to load and inline $ref targets in
                                  other files or at other URLs.
        """
        self._http_client = http_client
        self._resolve_external_refs = resolve_external_refs
        self._cache: dict[str, Any] = {}
        self._targets: dict[str, tuple[Any, Any, str | None]] = {}
        self._resolved: dict[str, Any] = {}
        self._truncated: dict[str, Any] = {}
        self._graph: dict[str, list[str]] = {}
        self._cycles: dict[str, frozenset[str]] = {}

    def load(self, source: str) -> Document:
        """Load, dereference and validate an OpenAPI document.

        Args:
            source: URL or file path to the OpenAPI document.

        Returns:
            The validated Document.

        Raises:
            SchemaLoadError: If the document cannot be loaded or parsed.
            SchemaValidationError: If the document is not a readable OpenAPI v3 description.
            UnsupportedConstructError: If the document is not OpenAPI v3/v3.1.
        """
        location = source if is_url(source) else str(Path(source).resolve())
        content = self.load_raw(location)
        self._check_version(content, source)
        content = self.dereference(content, location)
        return self.validate(content, source)

    def load_raw(self, location: str) -> Any:
        """Load and parse a document without touching its references."""
        if location not in self._cache:
            if is_url(location):
                self._cache[location] = self._load_from_url(location)
            else:
                self._cache[location] = self._load_from_file(location)
        return self._cache[location]

    def dereference(self, content: dict, location: str | None = None) -> dict:
        """Inline every resolvable $ref in ``content``.

        Args:
            content: The parsed document.
            location: Where the document was loaded from; the base for
                      relative external references.

        Returns:
            A new tree with references replaced by their targets. The
            input is not modified.
        """
        self._targets = {}
        self._resolved = {}
        self._truncated = {}
        self._graph = {}
        self._cycles = {}
        return self._resolve(content, content, location, None)

    @staticmethod
    def validate(content: Any, source: str) -> Document:
        """Validate dereferenced content into a Document."""
        try:
            return Document.model_validate(content, context={'schemas': {}})
        except ValidationError as e:
            errors = [
                f'{".".join(str(part) for part in error["loc"])}: {error["msg"]}'
                for error in e.errors()
            ]
            raise SchemaValidationError(source, errors=errors)

    @staticmethod
    def _check_version(content: Any, source: str) -> None:
        if not isinstance(content, dict):
            raise SchemaValidationError(source, errors=['document is not an object'])
        if 'swagger' in content:
            raise UnsupportedConstructError(
                f"Swagger {content['swagger']} document '{source}'",
                'Convert the document to OpenAPI 3 first',
            )
        version = str(content.get('openapi', ''))
        if not version.startswith('3.'):
            raise UnsupportedConstructError(
                f"OpenAPI version '{version or 'unknown'}' in '{source}'",
                'Only OpenAPI 3.0 and 3.1 documents are supported',
            )

    def _resolve(
        self, obj: Any, root: Any, location: str | None, scope: _Scope | None
    ) -> Any:
        """Recursively replace $ref nodes.

        ``scope`` is set while expanding a reference target; it tells which
        references lead back into the target's own cycle.
        """
        if isinstance(obj, dict):
            ref = obj.get('$ref')
            if isinstance(ref, str):
                return self._resolve_ref(obj, ref, root, location, scope)
            nested = scope._replace(composing=False) if scope else None
            resolved = {}
            for name, value in obj.items():
                if scope and scope.composing and name in COMPOSITION_KEYS:
                    resolved[name] = self._resolve(value, root, location, scope)
                else:
                    resolved[name] = self._resolve(value, root, location, nested)
            return resolved
        if isinstance(obj, list):
            return [self._resolve(item, root, location, scope) for item in obj]
        return obj

    def _resolve_ref(
        self,
        node: dict,
        ref: str,
        root: Any,
        location: str | None,
        scope: _Scope | None,
    ) -> Any:
        try:
            key = self._locate(ref, root, location)
        except SchemaLoadError:
            logger.warning(f'Failed to resolve external reference: {ref}')
            return node
        except ValueError as e:
            logger.warning(f'Failed to resolve reference {ref}: {e}')
            return node
        if key is None:
            return node

        if scope is None or key not in scope.cycle:
            resolved = self._expand(key)
        elif scope.composing and key not in scope.inlined:
            # allOf/oneOf/anyOf members contribute their properties to the
            # schema that composes them, so they are inlined in full once.
            target, target_root, target_location = self._targets[key]
            resolved = self._resolve(
                target,
                target_root,
                target_location,
                scope._replace(inlined=scope.inlined | {key}),
            )
        else:
            resolved = self._shallow(key, ref)

        # OpenAPI 3.1 allows siblings next to $ref; they override the target.
        siblings = {name: value for name, value in node.items() if name != '$ref'}
        if siblings and isinstance(resolved, dict):
            resolved = {
                **resolved,
                **self._resolve(siblings, root, location, scope),
            }
        return resolved

    def _locate(self, ref: str, root: Any, location: str | None) -> str | None:
        """Find the target of a $ref and register it under its key.

        Returns:
            The ``location#pointer`` key of the target, or None for an external
            reference while external resolution is disabled.

        Raises:
            SchemaLoadError: If the external document cannot be loaded.
            ValueError: If the pointer does not exist in the target document.
        """
        file_part, _, pointer = ref.partition('#')
        if file_part:
            if not self._resolve_external_refs:
                return None
            location = self._join(location, file_part)
            root = self.load_raw(location)

        key = f'{location}#{pointer}'
        if key not in self._targets:
            self._targets[key] = (self._resolve_json_pointer(root, pointer), root, location)
        return key

    def _expand(self, key: str) -> Any:
        """Return the dereferenced target of ``key``, expanding it only once."""
        if key not in self._resolved:
            target, root, location = self._targets[key]
            scope = _Scope(
                cycle=self._cycle_of(key), inlined=frozenset({key}), composing=True
            )
            self._resolved[key] = self._resolve(target, root, location, scope)
        return self._resolved[key]

    def _shallow(self, key: str, ref: str) -> Any:
        """The target of ``key`` without its nested schemas."""
        if key not in self._truncated:
            logger.warning(f'Circular reference detected: {ref}')
            target = self._targets[key][0]
            if isinstance(target, dict):
                target = {
                    name: value
                    for name, value in target.items()
                    if name not in NESTED_SCHEMA_KEYS
                }
            self._truncated[key] = target
        return self._truncated[key]

    def _edges(self, key: str) -> list[str]:
        """Keys of the references that appear in the target of ``key``."""
        if key not in self._graph:
            target, root, location = self._targets[key]
            edges = []
            for ref in _references(target):
                try:
                    edge = self._locate(ref, root, location)
                except (SchemaLoadError, ValueError):
                    continue
                if edge is not None:
                    edges.append(edge)
            self._graph[key] = edges
        return self._graph[key]

    def _cycle_of(self, start: str) -> frozenset[str]:
        """Keys that can both be reached from ``start`` and lead back to it.

        Tarjan's strongly connected components over the reference graph,
        walked iteratively from ``start``. Every component found on the way
        is recorded, so each key is visited once per document.
        """
        if start in self._cycles:
            return self._cycles[start]

        index = {start: 0}
        low = {start: 0}
        stack = [start]
        on_stack = {start}
        work = [(start, iter(self._edges(start)))]

        while work:
            key, successors = work[-1]
            for successor in successors:
                if successor in self._cycles:
                    continue
                if successor not in index:
                    index[successor] = low[successor] = len(index)
                    stack.append(successor)
                    on_stack.add(successor)
                    work.append((successor, iter(self._edges(successor))))
                    break
                if successor in on_stack:
                    low[key] = min(low[key], index[successor])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    low[parent] = min(low[parent], low[key])
                if low[key] == index[key]:
                    members = set()
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        members.add(member)
                        if member == key:
                            break
                    # A lone key only forms a cycle when it references itself.
                    if len(members) == 1 and key not in self._edges(key):
                        members = set()
                    cycle = frozenset(members)
                    for member in members or {key}:
                        self._cycles[member] = cycle

        return self._cycles[start]

    @staticmethod
    def _join(base: str | None, relative: str) -> str:
        if is_url(relative):
            return relative
        if base and is_url(base):
            return urljoin(base, relative)
        base_dir = Path(base).parent if base else Path.cwd()
        return str((base_dir / relative).resolve())

    @staticmethod
    def _resolve_json_pointer(obj: Any, pointer: str) -> Any:
        """Resolve a JSON pointer within an object."""
        if not pointer or pointer == '/':
            return obj

        parts = pointer.strip('/').split('/')
        current = obj

        for part in parts:
            part = part.replace('~1', '/').replace('~0', '~')
            if isinstance(current, dict):
                if part not in current:
                    raise ValueError(f'JSON pointer path not found: {pointer}')
                current = current[part]
            elif isinstance(current, list):
                try:
                    current = current[int(part)]
                except (ValueError, IndexError):
                    raise ValueError(f'JSON pointer path not found: {pointer}')
            else:
                raise ValueError(f'JSON pointer path not found: {pointer}')

        return current

    def _load_from_url(self, url: str) -> Any:
        """Load document content from a URL."""
        try:
            if self._http_client:
                response = self._http_client.get(url)
            else:
                response = httpx.get(url, follow_redirects=True, timeout=30.0)

            response.raise_for_status()
            content_type = response.headers.get('content-type', '')
            if 'yaml' in content_type or url.endswith(('.yaml', '.yml')):
                return yaml.safe_load(response.text)
            return json.loads(response.text)

        except httpx.HTTPError as e:
            raise SchemaLoadError(url, cause=e)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SchemaLoadError(url, cause=e)

    def _load_from_file(self, file_path: str) -> Any:
        """Load document content from a file."""
        path = Path(file_path)
        if not path.exists():
            raise SchemaLoadError(
                str(file_path), cause=FileNotFoundError(f'File not found: {path}')
            )

        try:
            content = path.read_text(encoding='utf-8')
            if path.suffix.lower() in ('.yaml', '.yml'):
                return yaml.safe_load(content)
            return json.loads(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SchemaLoadError(str(file_path), cause=e)
        except OSError as e:
            raise SchemaLoadError(str(file_path), cause=e)


def _references(obj: Any) -> Iterator[str]:
    """Yield the $ref strings in ``obj`` without following them."""
    if isinstance(obj, dict):
        ref = obj.get('$ref')
        if isinstance(ref, str):
            yield ref
        for value in obj.values():
            yield from _references(value)
    elif isinstance(obj, list):
        for item in obj:
            yield from _references(item)


def dereference(source: str, resolve_external_refs: bool = True) -> Document:
    """Load ``source`` and return its fully dereferenced Document."""
    return SchemaLoader(resolve_external_refs=resolve_external_refs).load(source)
