"""Synthesis of Actions from OpenAPI operations.

One Action is built per (path, HTTP verb). Its inputs come from
``spectralgen.reader.inputs``; its perform function is described by a
``PerformPlan`` that the writer renders into TypeScript.
"""

import logging
import re

from spectralgen.exceptions import MissingRequiredFieldError
from spectralgen.ir import Action, ActionDisplay, Input, KeyMapping, PerformPlan
from spectralgen.reader.document import Operation, Parameter, PathItem, Reference
from spectralgen.reader.inputs import OperationInputs, get_inputs
from spectralgen.utils import (
    clean_identifier,
    start_case,
    to_group_tag,
    unique_identifier,
)

logger = logging.getLogger(__name__)

__all__ = [
    'BODY_VERBS',
    'CONNECTION_INPUT',
    'action_key',
    'build_action',
    'build_perform_plan',
    'operations_to_actions',
]

BODY_VERBS = frozenset({'post', 'put', 'patch'})

CONNECTION_INPUT = Input(
    upstream_key='connection',
    key='connection',
    label='Connection',
    type='connection',
    required=True,
)

_PLACEHOLDER = re.compile(r'\{([^}]+)\}')


def action_key(
    path: str,
    verb: str,
    operation: Operation,
    seen: frozenset[str] = frozenset(),
) -> tuple[str, frozenset[str]]:
    """Derive a collision-free action key.

    The operationId is preferred; ``"<verb> <path>"`` is used when there is
    no operationId or its key is already taken. If both are taken the
    preferred candidate is re-derived with the ``"other "`` prefix.

    Returns:
        Tuple of (key, seen set including the key).

    Raises:
        MissingRequiredFieldError: If no identifier can be derived at all.
    """
    candidates = [
        candidate
        for candidate in (operation.operationId, f'{verb} {path}')
        if candidate and clean_identifier(candidate)
    ]
    if not candidates:
        raise MissingRequiredFieldError('action key', f'{verb.upper()} {path}')

    for candidate in candidates:
        key = clean_identifier(candidate)
        if key not in seen:
            return key, seen | {key}

    return unique_identifier(candidates[0], seen)


def _mapping(inputs: list[Input]) -> tuple[KeyMapping, ...]:
    return tuple(
        KeyMapping(key=value.key, upstream_key=value.upstream_key) for value in inputs
    )


def build_perform_plan(path: str, verb: str, inputs: OperationInputs) -> PerformPlan:
    """Describe the perform function of an action.

    Path placeholders are rewritten from upstream names to input keys in
    template interpolation form: ``/users/{user-id}`` -> ``/users/${userId}``.
    """
    path_keys = {value.upstream_key: value.key for value in inputs.path}
    template = _PLACEHOLDER.sub(
        lambda match: '${' + path_keys.get(match.group(1), match.group(1)) + '}',
        path,
    )

    return PerformPlan(
        verb=verb,
        path=template,
        arguments=tuple(value.key for value in inputs.all),
        body=_mapping(inputs.body) if verb in BODY_VERBS else None,
        query=_mapping(inputs.query) if inputs.query else None,
    )


def build_action(
    path: str,
    verb: str,
    operation: Operation,
    shared_parameters: list[Parameter | Reference] | None = None,
    seen: frozenset[str] = frozenset(),
) -> tuple[Action, frozenset[str]]:
    """Build the Action for one operation.

    Args:
        path: The path template, e.g. ``/users/{userId}``.
        verb: Lower-case HTTP verb.
        operation: The operation object.
        shared_parameters: Parameters declared on the path item.
        seen: Action keys already taken in the document.

    Returns:
        Tuple of (action, seen set including the action key).

    Raises:
        UnresolvedReferenceError: If a parameter or request body is still a $ref.
        MissingRequiredFieldError: If no action key can be derived.
    """
    location = f'{verb.upper()} {path}'
    key, seen = action_key(path, verb, operation, seen)
    inputs = get_inputs(operation, shared_parameters, location)

    action = Action(
        key=key,
        group_tag=to_group_tag(path),
        display=ActionDisplay(
            label=start_case(key),
            description=operation.summary or operation.description or location,
        ),
        inputs={
            CONNECTION_INPUT.key: CONNECTION_INPUT,
            **{value.key: value for value in inputs.all},
        },
        perform=build_perform_plan(path, verb, inputs),
    )
    logger.debug(f'Built action {key} for {location}')
    return action, seen


def operations_to_actions(
    path: str, path_item: PathItem, seen: frozenset[str] = frozenset()
) -> tuple[list[Action], frozenset[str]]:
    """Build one Action per HTTP verb declared on a path item."""
    actions = []
    for verb, operation in path_item.operations():
        action, seen = build_action(path, verb, operation, path_item.parameters, seen)
        actions.append(action)
    return actions, seen
