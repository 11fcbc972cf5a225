"""Writer for ``src/connections.ts``."""

from spectralgen.ir import Connection, ConnectionInput
from spectralgen.writer.source import (
    CodeWriter,
    SourceDocument,
    property_key,
    string_literal,
)

__all__ = ['CONNECTIONS_PATH', 'build_connections_document', 'sort_connections']

CONNECTIONS_PATH = 'src/connections.ts'
SPECTRAL_MODULE = '@prismatic-io/spectral'


def sort_connections(connections: tuple[Connection, ...] | list[Connection]) -> list[Connection]:
    """Order connections by ``order_priority``; ties keep encounter order."""
    return sorted(connections, key=lambda connection: connection.order_priority)


def write_connection_input(writer: CodeWriter, key: str, value: ConnectionInput) -> None:
    with writer.block(f'{property_key(key)}: {{', '},'):
        writer.line(f'label: {string_literal(value.label)},')
        writer.line(f'type: {string_literal(value.type)},')
        if value.required is not None:
            writer.line(f'required: {"true" if value.required else "false"},')
        if value.shown is not None:
            writer.line(f'shown: {"true" if value.shown else "false"},')
        if value.placeholder is not None:
            writer.line(f'placeholder: {string_literal(value.placeholder)},')
        if value.default is not None:
            writer.line(f'default: {string_literal(value.default)},')
        if value.example is not None:
            writer.line(f'example: {string_literal(value.example)},')
        if value.comments is not None:
            writer.line(f'comments: {string_literal(value.comments)},')


def _connection_initializer(connection: Connection):
    function = 'connection' if connection.oauth2_type is None else 'oauth2Connection'

    def initializer(writer: CodeWriter) -> None:
        with writer.block(f'{function}({{', '})'):
            writer.line(f'key: {string_literal(connection.key)},')
            writer.line(f'label: {string_literal(connection.label)},')
            if connection.comments is not None:
                writer.line(f'comments: {string_literal(connection.comments)},')
            if connection.oauth2_type is not None:
                writer.line(f'oauth2Type: OAuth2Type.{connection.oauth2_type.value},')
            with writer.block('inputs: {', '},'):
                for key, value in connection.inputs.items():
                    write_connection_input(writer, key, value)

    return initializer


def build_connections_document(connections: tuple[Connection, ...]) -> SourceDocument:
    """Build ``src/connections.ts``.

    Every connection is a named export; the default export lists them by
    ascending ``order_priority``.
    """
    document = SourceDocument(path=CONNECTIONS_PATH)

    if any(connection.oauth2_type is None for connection in connections):
        document.imports.add_named(SPECTRAL_MODULE, 'connection')
    if any(connection.oauth2_type is not None for connection in connections):
        document.imports.add_named(SPECTRAL_MODULE, 'oauth2Connection', 'OAuth2Type')

    for connection in connections:
        document.declare(connection.key, _connection_initializer(connection), exported=True)

    ordered = [connection.key for connection in sort_connections(connections)]
    document.default_export = '[' + ', '.join(ordered) + ']'
    return document
