"""Synthesis of Connections from OpenAPI security schemes."""

import logging

from spectralgen.exceptions import UnsupportedConstructError
from spectralgen.ir import Connection, ConnectionInput, OAuth2Type
from spectralgen.reader.document import OAuthFlow, Reference, SecurityScheme, resolved
from spectralgen.utils import clean_identifier, create_description, header_case, start_case

logger = logging.getLogger(__name__)

__all__ = [
    'API_KEY_PRIORITY',
    'BASIC_PRIORITY',
    'OAUTH2_PRIORITY',
    'build_connections',
]

OAUTH2_PRIORITY = 0
API_KEY_PRIORITY = 50
BASIC_PRIORITY = 1000


def _api_key_connection(key: str, scheme: SecurityScheme) -> Connection:
    if scheme.type == 'apiKey':
        label = header_case(scheme.name or key)
    else:
        label = 'Token'

    return Connection(
        key=clean_identifier(key),
        label=start_case(key),
        comments=create_description(scheme.description),
        order_priority=API_KEY_PRIORITY,
        inputs={
            'apiKey': ConnectionInput(label=label, type='password', required=True),
        },
    )


def _basic_connection(key: str, scheme: SecurityScheme) -> Connection:
    return Connection(
        key=clean_identifier(key),
        label=start_case(key),
        comments=create_description(scheme.description),
        order_priority=BASIC_PRIORITY,
        inputs={
            'username': ConnectionInput(label='Username', type='string', required=True),
            'password': ConnectionInput(label='Password', type='password', required=True),
        },
    )


def _oauth2_connection(key: str, flow: OAuthFlow) -> Connection:
    """Build an authorization code connection.

    URLs the flow declares are pre-filled and hidden; without scopes the
    scopes input is hidden with an empty default.
    """
    uses_scopes = bool(flow.scopes)

    return Connection(
        key=clean_identifier(key),
        label='OAuth 2.0',
        oauth2_type=OAuth2Type.AUTHORIZATION_CODE,
        order_priority=OAUTH2_PRIORITY,
        inputs={
            'authorizeUrl': ConnectionInput(
                label='Authorization URL',
                type='string',
                required=True,
                shown=not flow.authorizationUrl,
                default=flow.authorizationUrl or None,
                comments='Authorization URL',
            ),
            'tokenUrl': ConnectionInput(
                label='Token URL',
                type='string',
                required=True,
                shown=not flow.tokenUrl,
                default=flow.tokenUrl or None,
                comments='Token URL',
            ),
            'scopes': ConnectionInput(
                label='Scopes',
                type='string',
                required=True,
                shown=uses_scopes,
                default=None if uses_scopes else '',
                comments='Space-delimited scopes',
            ),
            'clientId': ConnectionInput(
                label='Client ID',
                type='string',
                required=True,
                shown=True,
                comments='Client identifier',
            ),
            'clientSecret': ConnectionInput(
                label='Client Secret',
                type='password',
                required=True,
                shown=True,
                comments='Client secret',
            ),
        },
    )


def build_connections(
    key: str, scheme: SecurityScheme | Reference
) -> list[Connection]:
    """Translate one security scheme into Connections.

    Args:
        key: The scheme's name under ``components.securitySchemes``.
        scheme: The security scheme object.

    Returns:
        The Connections for the scheme. Every supported scheme yields one.

    Raises:
        UnresolvedReferenceError: If the scheme is a $ref.
        UnsupportedConstructError: For OAuth2 schemes without an
            authorizationCode flow and for any other scheme type.
    """
    scheme = resolved(scheme, f"security scheme '{key}'")
    http_scheme = (scheme.scheme or '').lower()

    if scheme.type == 'apiKey' or (scheme.type == 'http' and http_scheme == 'bearer'):
        connection = _api_key_connection(key, scheme)
    elif scheme.type == 'http' and http_scheme == 'basic':
        connection = _basic_connection(key, scheme)
    elif scheme.type == 'oauth2':
        flow = scheme.flows.authorizationCode if scheme.flows else None
        if flow is None:
            raise UnsupportedConstructError(
                f"OAuth 2.0 flows of security scheme '{key}'",
                'Only the authorizationCode flow is supported',
            )
        connection = _oauth2_connection(key, flow)
    else:
        construct = scheme.type
        if scheme.type == 'http':
            construct = f'http {scheme.scheme}'
        raise UnsupportedConstructError(
            f"Security scheme type '{construct}' of '{key}'",
            'Supported schemes are apiKey, http basic, http bearer and oauth2',
        )

    logger.debug(f'Built connection {connection.key} for security scheme {key}')
    return [connection]
