"""Custom exceptions for spectralgen.

This module defines the hierarchy of exceptions raised while reading an
OpenAPI document and emitting component sources. Every error is fatal: a
generation run either completes or aborts with one of these.
"""


class SpectralGenError(Exception):
    """Base exception for all spectralgen errors.

    All exceptions raised by spectralgen inherit from this class, making it
    easy to catch every generator failure with a single except clause.

    Example:
        try:
            generator.generate()
        except SpectralGenError as e:
            print(f"spectralgen error: {e}")
    """

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class SchemaError(SpectralGenError):
    """Base exception for schema-related errors."""

    pass


class SchemaLoadError(SchemaError):
    """Failed to load an OpenAPI document from a source.

    Attributes:
        source: The source path or URL that failed to load.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, source: str, cause: Exception | None = None):
        self.source = source
        self.cause = cause
        message = f"Failed to load schema from '{source}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class SchemaValidationError(SchemaError):
    """The loaded document is not an OpenAPI v3 description we can read.

    Attributes:
        source: The source path or URL of the invalid document.
        errors: List of validation error messages.
    """

    def __init__(self, source: str, errors: list[str] | None = None):
        self.source = source
        self.errors = errors or []
        message = f"Schema validation failed for '{source}'"
        if errors:
            message += f': {"; ".join(errors)}'
        super().__init__(message)


class UnresolvedReferenceError(SchemaError):
    """A $ref survived dereferencing in a position the reader consumes.

    Parameters, request bodies, the schemas they carry and security schemes
    must all be inlined before actions and connections are derived.

    Attributes:
        reference: The $ref string that was found.
        location: Where in the document it was found.
    """

    def __init__(self, reference: str, location: str | None = None):
        self.reference = reference
        self.location = location
        message = f"Unresolved reference '{reference}'"
        if location:
            message += f' in {location}'
        message += '; all references must be resolved before generation'
        super().__init__(message)


class UnsupportedConstructError(SpectralGenError):
    """The document uses a construct the generator cannot translate.

    Attributes:
        construct: Description of the unsupported construct.
        suggestion: Optional suggestion for a workaround.
    """

    def __init__(self, construct: str, suggestion: str | None = None):
        self.construct = construct
        self.suggestion = suggestion
        message = f'Unsupported construct: {construct}'
        if suggestion:
            message += f'. {suggestion}'
        super().__init__(message)


class MissingRequiredFieldError(SpectralGenError):
    """A value the generator needs could not be derived from the document.

    Attributes:
        field: The missing field (e.g. 'base URL', 'action key').
        context: Optional description of where it was expected.
    """

    def __init__(self, field: str, context: str | None = None):
        self.field = field
        self.context = context
        message = f'Failed to determine {field}'
        if context:
            message += f' for {context}'
        super().__init__(message)


class EmissionIOError(SpectralGenError):
    """Error writing generated artifacts.

    Attributes:
        output_path: The path where output was being written.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, output_path: str, cause: Exception | None = None):
        self.output_path = output_path
        self.cause = cause
        message = f"Failed to write output to '{output_path}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class ConfigurationError(SpectralGenError):
    """Error in configuration.

    Attributes:
        config_path: The path to the configuration file, if applicable.
        field: The specific configuration field that is invalid.
    """

    def __init__(
        self, message: str, config_path: str | None = None, field: str | None = None
    ):
        self.config_path = config_path
        self.field = field
        full_message = message
        if config_path:
            full_message = f"{message} in '{config_path}'"
        if field:
            full_message += f' (field: {field})'
        super().__init__(full_message)
