"""OpenAPI reader: turns an OpenAPI v3/v3.1 document into the ``Result`` IR."""

from spectralgen.reader.actions import build_action, operations_to_actions
from spectralgen.reader.assembler import assemble, get_base_url, read, read_async
from spectralgen.reader.connections import build_connections
from spectralgen.reader.inputs import derive_inputs, get_inputs, merge_parameters
from spectralgen.reader.loader import SchemaLoader, dereference

__all__ = [
    'SchemaLoader',
    'assemble',
    'build_action',
    'build_connections',
    'dereference',
    'derive_inputs',
    'get_base_url',
    'get_inputs',
    'merge_parameters',
    'operations_to_actions',
    'read',
    'read_async',
]
