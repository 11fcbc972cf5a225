"""spectralgen - Generate Spectral integration components from OpenAPI specifications.

spectralgen reads an OpenAPI v3/v3.1 document and emits the TypeScript sources
of an integration component: actions grouped by path, connections derived
from the security schemes, an HTTP client and the component manifest.

Quick Start:
    >>> import spectralgen
    >>>
    >>> result = spectralgen.read('./petstore.yaml')
    >>> spectralgen.write('petstore', result, './petstore')

CLI Usage:
    $ spectralgen generate --openapi ./petstore.yaml --name Petstore --output ./petstore
    $ spectralgen generate --config spectralgen.yaml
"""

from importlib.metadata import PackageNotFoundError, version

from spectralgen.config import DocumentConfig, GeneratorConfig, get_config
from spectralgen.exceptions import (
    ConfigurationError,
    EmissionIOError,
    MissingRequiredFieldError,
    SchemaError,
    SchemaLoadError,
    SchemaValidationError,
    SpectralGenError,
    UnresolvedReferenceError,
    UnsupportedConstructError,
)
from spectralgen.generator import ComponentGenerator
from spectralgen.ir import Result
from spectralgen.reader import SchemaLoader, assemble, read, read_async
from spectralgen.writer import render, write, write_async

__all__ = [
    # Pipeline
    'read',
    'read_async',
    'assemble',
    'render',
    'write',
    'write_async',
    'ComponentGenerator',
    'SchemaLoader',
    'Result',
    # Configuration
    'DocumentConfig',
    'GeneratorConfig',
    'get_config',
    # Exceptions
    'SpectralGenError',
    'SchemaError',
    'SchemaLoadError',
    'SchemaValidationError',
    'UnresolvedReferenceError',
    'UnsupportedConstructError',
    'MissingRequiredFieldError',
    'EmissionIOError',
    'ConfigurationError',
]

try:
    __version__ = version('spectralgen')
except PackageNotFoundError:
    __version__ = 'unknown'
