"""Assembly of the ``Result`` IR from a dereferenced OpenAPI document."""

import asyncio
import logging

from spectralgen.exceptions import MissingRequiredFieldError
from spectralgen.ir import Action, Component, ComponentDisplay, Connection, Result
from spectralgen.reader.actions import operations_to_actions
from spectralgen.reader.connections import build_connections
from spectralgen.reader.document import Document
from spectralgen.reader.loader import SchemaLoader
from spectralgen.utils import unique_identifier

logger = logging.getLogger(__name__)

__all__ = [
    'assemble',
    'build_actions',
    'build_component',
    'build_connection_list',
    'get_base_url',
    'read',
    'read_async',
]

# Names bound at the top level of the generated action group modules.
RESERVED_ACTION_KEYS = frozenset({'rawRequest', 'action', 'util', 'createClient'})

# Names bound at the top level of the generated connections and client modules.
RESERVED_CONNECTION_KEYS = frozenset(
    {
        'connection',
        'oauth2Connection',
        'OAuth2Type',
        'baseUrl',
        'connectionKeys',
        'createClient',
        'createHttpClient',
        'toAuthorizationHeaders',
        'util',
    }
)


def get_base_url(document: Document, fallback: str | None = None) -> str:
    """Determine the API base URL.

    ``basePath`` wins over ``servers[0].url``; server variables are replaced
    by their defaults. ``fallback`` is used when the document has neither.

    Raises:
        MissingRequiredFieldError: If no base URL can be determined.
    """
    if document.basePath:
        return document.basePath

    if document.servers:
        url = document.servers[0].resolved_url()
        if url:
            return url

    if fallback:
        return fallback

    raise MissingRequiredFieldError('base URL', f"'{document.info.title}'")


def build_component(document: Document, icon_path: str = 'icon.png') -> Component:
    info = document.info
    description = info.description or f'Generated component for {info.title} {info.version}'
    return Component(
        display=ComponentDisplay(
            label=info.title,
            description=description.strip(),
            icon_path=icon_path,
        )
    )


def build_actions(document: Document) -> list[Action]:
    """Build every action of the document, in path and verb order.

    Action keys are unique across the whole document since every action
    becomes a member of the merged actions export.
    """
    seen = RESERVED_ACTION_KEYS
    actions = []
    for path, path_item in document.paths.items():
        path_actions, seen = operations_to_actions(path, path_item, seen)
        actions.extend(path_actions)
    return actions


def build_connection_list(document: Document) -> list[Connection]:
    """Build the connections of every security scheme, in document order."""
    schemes = document.components.securitySchemes if document.components else {}

    seen = RESERVED_CONNECTION_KEYS
    connections = []
    for name, scheme in schemes.items():
        for connection in build_connections(name, scheme):
            key, seen = unique_identifier(connection.key, seen)
            if key != connection.key:
                logger.debug(f'Renamed connection {connection.key} to {key}')
                connection = connection.model_copy(update={'key': key})
            connections.append(connection)
    return connections


def assemble(
    document: Document,
    base_url: str | None = None,
    icon_path: str = 'icon.png',
) -> Result:
    """Combine a document's metadata, actions and connections into a Result.

    Args:
        document: The dereferenced document.
        base_url: Fallback base URL for documents without servers.
        icon_path: Icon path written into the component display.

    Raises:
        UnresolvedReferenceError: If a consumed position still holds a $ref.
        UnsupportedConstructError: If a security scheme cannot be translated.
        MissingRequiredFieldError: If no base URL can be determined.
    """
    result = Result(
        base_url=get_base_url(document, base_url),
        component=build_component(document, icon_path),
        actions=tuple(build_actions(document)),
        connections=tuple(build_connection_list(document)),
    )
    logger.info(
        f'Assembled {document.info.title}: {len(result.actions)} actions, '
        f'{len(result.connections)} connections'
    )
    return result


def read(
    source: str,
    base_url: str | None = None,
    icon_path: str = 'icon.png',
    resolve_external_refs: bool = True,
) -> Result:
    """Load, dereference and assemble the OpenAPI document at ``source``."""
    loader = SchemaLoader(resolve_external_refs=resolve_external_refs)
    return assemble(loader.load(source), base_url=base_url, icon_path=icon_path)


async def read_async(
    source: str,
    base_url: str | None = None,
    icon_path: str = 'icon.png',
    resolve_external_refs: bool = True,
) -> Result:
    """Asynchronous variant of ``read``; the work runs in a worker thread."""
    return await asyncio.to_thread(
        read,
        source,
        base_url=base_url,
        icon_path=icon_path,
        resolve_external_refs=resolve_external_refs,
    )
