"""Writer for ``src/client.ts``.

The client module exports the API base URL and ``createClient``, which
rejects connections the component does not declare and derives the
Authorization header from whichever credentials the connection carries.
"""

from spectralgen.ir import Connection
from spectralgen.writer.source import CodeWriter, SourceDocument, string_literal

__all__ = ['CLIENT_PATH', 'build_client_document']

CLIENT_PATH = 'src/client.ts'
SPECTRAL_MODULE = '@prismatic-io/spectral'
HTTP_CLIENT_MODULE = '@prismatic-io/spectral/dist/clients/http'


def _write_authorization_headers(writer: CodeWriter) -> None:
    with writer.block('(connection: Connection): { Authorization: string } => {', '}'):
        writer.line('const accessToken = util.types.toString(connection.token?.access_token);')
        with writer.block('if (accessToken) {', '}'):
            writer.line('return { Authorization: `Bearer ${accessToken}` };')
        writer.blank_line()
        writer.line('const apiKey = util.types.toString(connection.fields?.apiKey);')
        with writer.block('if (apiKey) {', '}'):
            writer.line('return { Authorization: `Bearer ${apiKey}` };')
        writer.blank_line()
        writer.line('const username = util.types.toString(connection.fields?.username);')
        writer.line('const password = util.types.toString(connection.fields?.password);')
        with writer.block('if (username && password) {', '}'):
            writer.line('const encoded = Buffer.from(`${username}:${password}`).toString("base64");')
            writer.line('return { Authorization: `Basic ${encoded}` };')
        writer.blank_line()
        with writer.block('throw new Error(', ');'):
            writer.line(
                '`Failed to guess at authorization parameters for Connection: ${connection.key}`'
            )


def _write_create_client(writer: CodeWriter) -> None:
    with writer.block('(connection: Connection): HttpClient => {', '}'):
        with writer.block('if (!connectionKeys.includes(connection.key)) {', '}'):
            with writer.block('throw new ConnectionError(', ');'):
                writer.line('connection,')
                writer.line('`Received unexpected connection type: ${connection.key}`')
        writer.blank_line()
        with writer.block('const client = createHttpClient({', '});'):
            writer.line('baseUrl,')
            with writer.block('headers: {', '},'):
                writer.line('...toAuthorizationHeaders(connection),')
                writer.line('Accept: "application/json",')
            writer.line('responseType: "json",')
        writer.line('return client;')


def build_client_document(base_url: str, connections: tuple[Connection, ...]) -> SourceDocument:
    """Build ``src/client.ts`` for the given base URL and connections."""
    document = SourceDocument(path=CLIENT_PATH)
    document.imports.add_named(SPECTRAL_MODULE, 'Connection', 'ConnectionError', 'util')
    document.imports.add_named(
        HTTP_CLIENT_MODULE, 'HttpClient', 'createClient as createHttpClient'
    )
    keys = [connection.key for connection in connections]
    document.imports.add_named('./connections', *keys)

    document.declare('baseUrl', string_literal(base_url), exported=True)
    document.declare(
        'connectionKeys',
        '[' + ', '.join(f'{key}.key' for key in keys) + ']',
        annotation='string[]',
    )
    document.declare('toAuthorizationHeaders', _write_authorization_headers)
    document.declare('createClient', _write_create_client, exported=True)
    return document
