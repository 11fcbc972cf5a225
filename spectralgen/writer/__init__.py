"""Code emitter: renders the ``Result`` IR into TypeScript component sources.

Output layout, relative to the destination root:

    src/index.ts                component manifest
    src/client.ts               baseUrl and createClient(connection)
    src/connections.ts          named connections and the ordered default export
    src/actions/<groupTag>.ts   one module per action group
    src/actions/index.ts        every group plus rawRequest
"""

from spectralgen.writer.emitter import (
    CodeEmitter,
    FileEmitter,
    StringEmitter,
    render,
    write,
    write_async,
)
from spectralgen.writer.source import CodeWriter, ImportCollector, SourceDocument

__all__ = [
    'CodeEmitter',
    'CodeWriter',
    'FileEmitter',
    'ImportCollector',
    'SourceDocument',
    'StringEmitter',
    'render',
    'write',
    'write_async',
]
