"""Writers for the action group modules and the actions index."""

import logging

from spectralgen.ir import Action, CleanFunction, Input, KeyMapping, PerformPlan
from spectralgen.utils import create_description
from spectralgen.writer.source import (
    CodeWriter,
    SourceDocument,
    property_key,
    string_literal,
    template_literal,
)

logger = logging.getLogger(__name__)

__all__ = [
    'ACTIONS_DIR',
    'build_action_documents',
    'build_action_group',
    'build_actions_index',
    'group_actions',
]

ACTIONS_DIR = 'src/actions'
SPECTRAL_MODULE = '@prismatic-io/spectral'
HTTP_CLIENT_MODULE = '@prismatic-io/spectral/dist/clients/http'

# Methods exposed by the HttpClient; other verbs go through client.request.
CLIENT_METHODS = frozenset({'get', 'put', 'post', 'delete', 'options', 'head', 'patch'})

# Names the actions index binds besides the group imports.
_INDEX_NAMES = frozenset({'baseUrl', 'buildRawRequestAction'})


def group_actions(actions: tuple[Action, ...] | list[Action]) -> dict[str, list[Action]]:
    """Group actions by tag, ordered by first appearance."""
    groups: dict[str, list[Action]] = {}
    for action in actions:
        groups.setdefault(action.group_tag, []).append(action)
    return groups


def _clean_expression(clean: CleanFunction) -> str:
    call = f'util.types.{clean.name}(value)'
    if clean.coalesce:
        return f'(value) => {call} || undefined'
    return f'(value) => {call}'


def _boolean(value: bool) -> str:
    return 'true' if value else 'false'


def write_input(writer: CodeWriter, key: str, value: Input) -> None:
    with writer.block(f'{property_key(key)}: {{', '},'):
        writer.line(f'label: {string_literal(value.label)},')
        writer.line(f'type: {string_literal(value.type)},')
        if value.required is not None:
            writer.line(f'required: {_boolean(value.required)},')
        if value.default is not None:
            writer.line(f'default: {string_literal(value.default)},')
        if value.model:
            with writer.block('model: [', '],'):
                for choice in value.model:
                    writer.line(
                        f'{{ label: {string_literal(choice.label)}, '
                        f'value: {string_literal(choice.value)} }},'
                    )
        if value.example is not None:
            writer.line(f'example: {string_literal(value.example)},')
        if value.clean is not None:
            writer.line(f'clean: {_clean_expression(value.clean)},')
        comments = create_description(value.comments)
        if comments:
            writer.line(f'comments: {string_literal(comments)},')


def _object_literal(mappings: tuple[KeyMapping, ...]) -> str:
    entries = [
        f'{string_literal(m.upstream_key)}: {m.key}' if m.is_renamed else m.key
        for m in mappings
    ]
    if not entries:
        return '{}'
    return '{ ' + ', '.join(entries) + ' }'


def _request_call(plan: PerformPlan) -> str:
    url = template_literal(plan.path)
    query = f'params: {_object_literal(plan.query)}' if plan.query is not None else None

    if plan.verb not in CLIENT_METHODS:
        options = [f'method: {string_literal(plan.verb)}', f'url: {url}']
        if plan.body is not None:
            options.append(f'data: {_object_literal(plan.body)}')
        if query:
            options.append(query)
        return 'client.request({ ' + ', '.join(options) + ' })'

    arguments = [url]
    if plan.body is not None:
        arguments.append(_object_literal(plan.body))
    if query:
        arguments.append('{ ' + query + ' }')
    return f'client.{plan.verb}({", ".join(arguments)})'


def write_perform(writer: CodeWriter, plan: PerformPlan) -> None:
    parameters = ', '.join(('connection', *plan.arguments))
    with writer.block(f'perform: async (context, {{ {parameters} }}) => {{', '},'):
        writer.line('const client = createClient(connection);')
        writer.line(f'const {{ data }} = await {_request_call(plan)};')
        writer.line('return { data };')


def _action_initializer(action: Action):
    def initializer(writer: CodeWriter) -> None:
        with writer.block('action({', '})'):
            with writer.block('display: {', '},'):
                writer.line(f'label: {string_literal(action.display.label)},')
                description = create_description(action.display.description) or ''
                writer.line(f'description: {string_literal(description)},')
            write_perform(writer, action.perform)
            with writer.block('inputs: {', '},'):
                for key, value in action.inputs.items():
                    write_input(writer, key, value)

    return initializer


def _key_list(keys: list[str]):
    def initializer(writer: CodeWriter) -> None:
        with writer.block('{', '}'):
            for key in keys:
                writer.line(f'{key},')

    return initializer


def build_action_group(group_tag: str, actions: list[Action]) -> SourceDocument:
    """Build ``src/actions/<group_tag>.ts`` exporting the group's actions."""
    document = SourceDocument(path=f'{ACTIONS_DIR}/{group_tag}.ts')
    document.imports.add_named(SPECTRAL_MODULE, 'action', 'util')
    document.imports.add_named('../client', 'createClient')

    for action in actions:
        document.declare(action.key, _action_initializer(action))
    document.default_export = _key_list([action.key for action in actions])
    return document


def _import_name(group_tag: str) -> str:
    return f'{group_tag}Group' if group_tag in _INDEX_NAMES else group_tag


def build_actions_index(group_tags: list[str]) -> SourceDocument:
    """Build ``src/actions/index.ts`` merging every group and ``rawRequest``."""
    document = SourceDocument(path=f'{ACTIONS_DIR}/index.ts')
    document.imports.add_named(HTTP_CLIENT_MODULE, 'buildRawRequestAction')
    document.imports.add_named('../client', 'baseUrl')
    for tag in group_tags:
        document.imports.add_default(f'./{tag}', _import_name(tag))

    def default_export(writer: CodeWriter) -> None:
        with writer.block('{', '}'):
            for tag in group_tags:
                writer.line(f'...{_import_name(tag)},')
            writer.line('rawRequest: buildRawRequestAction(baseUrl),')

    document.default_export = default_export
    return document


def build_action_documents(actions: tuple[Action, ...]) -> list[SourceDocument]:
    """Build one document per action group followed by the actions index."""
    groups = group_actions(actions)
    documents = [build_action_group(tag, members) for tag, members in groups.items()]
    documents.append(build_actions_index(list(groups)))
    logger.debug(f'Built {len(groups)} action groups for {len(actions)} actions')
    return documents
