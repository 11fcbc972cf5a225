"""Derivation of action inputs from operation parameters and request bodies.

Input keys are assigned by folding an immutable seen-key set through path,
query and body inputs in that order: an input whose sanitized key is already
taken is re-keyed from ``"other " + upstream_key``. Each operation starts from
its own set, so operations can be derived independently.
"""

import logging
from typing import Any, NamedTuple

from spectralgen.ir import CleanFunction, Input, InputChoice
from spectralgen.reader.document import Operation, Parameter, Reference, Schema, resolved
from spectralgen.utils import display_value, start_case, unique_identifier

logger = logging.getLogger(__name__)

__all__ = [
    'OperationInputs',
    'build_body_inputs',
    'build_parameter_input',
    'derive_inputs',
    'get_inputs',
    'input_model',
    'input_type',
    'merge_parameters',
]

JSON_CONTENT_TYPE = 'application/json'

# Names bound in the scope of every generated perform function; inputs are
# destructured into the same scope.
RESERVED_INPUT_KEYS = frozenset({'connection', 'createClient'})

_STRING_INPUT = ('string', CleanFunction(name='toString', coalesce=True))

_INPUT_TYPES: dict[str, tuple[str, CleanFunction]] = {
    'string': _STRING_INPUT,
    'integer': ('string', CleanFunction(name='toNumber')),
    'number': ('string', CleanFunction(name='toNumber')),
    'boolean': ('boolean', CleanFunction(name='toBool')),
}


class OperationInputs(NamedTuple):
    path: list[Input]
    query: list[Input]
    body: list[Input]

    @property
    def all(self) -> list[Input]:
        return [*self.path, *self.query, *self.body]


def input_type(schema: Schema | None) -> tuple[str, CleanFunction]:
    """Map a schema type to an input field type and clean function.

    Unknown or missing types fall back to the string mapping.
    """
    schema_type = schema.primary_type if schema else None
    return _INPUT_TYPES.get(schema_type, _STRING_INPUT)


def _choices(values: list[Any]) -> tuple[InputChoice, ...] | None:
    choices = []
    for value in values:
        if value is None:
            continue
        text = display_value(value)
        choices.append(InputChoice(label=start_case(text) or text, value=text))
    return tuple(choices) or None


def input_model(schema: Schema | None, location: str) -> tuple[InputChoice, ...] | None:
    """Derive the list of choices for an input from a schema's enum.

    Booleans never get choices. Some documents wrap an enum in a single
    ``allOf`` member; exactly one level of that nesting is unwrapped.
    """
    if schema is None or schema.primary_type == 'boolean':
        return None

    if schema.enum:
        return _choices(schema.enum)

    if schema.allOf:
        wrapped = resolved(schema.allOf[0], f'{location} allOf[0]')
        return _choices(wrapped.enum or [])

    return None


def merge_parameters(
    shared: list[Parameter | Reference],
    own: list[Parameter | Reference],
    location: str,
) -> list[Parameter]:
    """Merge path-item level parameters with an operation's own parameters.

    Parameters are deduplicated by name only; an operation-level parameter
    replaces the shared one with the same name, keeping the shared position.

    Raises:
        UnresolvedReferenceError: If any parameter is still a $ref.
    """
    merged: dict[str, Parameter] = {}
    for index, node in enumerate([*shared, *own]):
        parameter = resolved(node, f'{location} parameters[{index}]')
        merged[parameter.name] = parameter
    return list(merged.values())


def _build_input(
    upstream_key: str,
    schema: Schema | None,
    seen: frozenset[str],
    location: str,
    required: bool | None,
    comments: str | None,
    example: Any = None,
) -> tuple[Input, frozenset[str]]:
    field_type, clean = input_type(schema)
    key, seen = unique_identifier(upstream_key, seen)

    if schema is not None and schema.example is not None:
        example = schema.example
    default = schema.default if schema is not None else None

    return (
        Input(
            upstream_key=upstream_key,
            key=key,
            label=start_case(upstream_key) or upstream_key,
            type=field_type,
            required=required,
            comments=comments,
            default=display_value(default) if default is not None else None,
            example=display_value(example) if example is not None else None,
            model=input_model(schema, location),
            clean=clean,
        ),
        seen,
    )


def build_parameter_input(
    parameter: Parameter, seen: frozenset[str], location: str
) -> tuple[Input, frozenset[str]]:
    """Build the Input for a path or query parameter.

    Returns:
        Tuple of (input, seen set including the input's key).
    """
    location = f"{location} parameter '{parameter.name}'"
    schema = (
        resolved(parameter.schema_, location) if parameter.schema_ is not None else None
    )
    return _build_input(
        parameter.name,
        schema,
        seen,
        location,
        required=parameter.required,
        comments=parameter.description,
        example=(parameter.model_extra or {}).get('example'),
    )


def derive_inputs(
    parameters: list[Parameter], seen: frozenset[str], location: str
) -> tuple[list[Input], frozenset[str]]:
    """Fold a list of parameters into Inputs, threading the seen-key set.

    Args:
        parameters: Parameters of a single location, in order.
        seen: Keys already assigned in this operation.
        location: Description of the operation for error messages.

    Returns:
        Tuple of (inputs, seen set extended with their keys).
    """
    inputs = []
    for parameter in parameters:
        parameter_input, seen = build_parameter_input(parameter, seen, location)
        inputs.append(parameter_input)
    return inputs, seen


def _flatten_properties(
    schema: Schema, location: str
) -> tuple[dict[str, Schema], set[str]]:
    """Merge a body schema's own properties with those of its allOf members."""
    properties = dict(schema.properties or {})
    required = set(schema.required or [])

    for index, member in enumerate(schema.allOf or []):
        member = resolved(member, f'{location} allOf[{index}]')
        properties.update(member.properties or {})
        required.update(member.required or [])

    return (
        {
            name: resolved(node, f"{location} property '{name}'")
            for name, node in properties.items()
        },
        required,
    )


def build_body_inputs(
    schema: Schema, seen: frozenset[str], location: str
) -> tuple[list[Input], frozenset[str]]:
    """Build Inputs for the properties of a JSON request body schema.

    ``readOnly`` properties are skipped entirely.
    """
    properties, required = _flatten_properties(schema, location)

    inputs = []
    for name, prop in properties.items():
        if prop.readOnly:
            continue
        body_input, seen = _build_input(
            name,
            prop,
            seen,
            f"{location} property '{name}'",
            required=name in required,
            comments=prop.description,
        )
        inputs.append(body_input)
    return inputs, seen


def _request_body_schema(operation: Operation, location: str) -> Schema | None:
    if operation.requestBody is None:
        return None

    request_body = resolved(operation.requestBody, f'{location} request body')
    media_type = request_body.content.get(JSON_CONTENT_TYPE)
    if media_type is None or media_type.schema_ is None:
        return None
    return resolved(media_type.schema_, f'{location} request body schema')


def get_inputs(
    operation: Operation,
    shared_parameters: list[Parameter | Reference] | None = None,
    location: str = 'operation',
) -> OperationInputs:
    """Compute the path, query and body inputs of an operation.

    Args:
        operation: The (dereferenced) operation.
        shared_parameters: Parameters declared on the path item.
        location: Description of the operation for error messages.

    Returns:
        OperationInputs with every key unique within the operation.

    Raises:
        UnresolvedReferenceError: If a parameter, request body or a schema
            they rely on is still a $ref.
    """
    parameters = merge_parameters(
        shared_parameters or [], operation.parameters, location
    )
    seen = RESERVED_INPUT_KEYS

    path_inputs, seen = derive_inputs(
        [p for p in parameters if p.in_ == 'path'], seen, location
    )
    query_inputs, seen = derive_inputs(
        [p for p in parameters if p.in_ == 'query'], seen, location
    )

    body_schema = _request_body_schema(operation, location)
    body_inputs = []
    if body_schema is not None:
        body_inputs, seen = build_body_inputs(body_schema, seen, location)

    logger.debug(
        f'{location}: {len(path_inputs)} path, {len(query_inputs)} query, '
        f'{len(body_inputs)} body inputs'
    )
    return OperationInputs(path=path_inputs, query=query_inputs, body=body_inputs)
