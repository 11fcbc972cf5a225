"""Tests for rendering and emitting component sources."""

import asyncio

import pytest

from spectralgen.exceptions import EmissionIOError
from spectralgen.ir import Result
from spectralgen.reader import assemble
from spectralgen.reader.actions import build_action
from spectralgen.reader.document import Operation
from spectralgen.writer import FileEmitter, StringEmitter, render, write, write_async
from spectralgen.writer.actions import build_action_group, build_actions_index
from spectralgen.writer.connections import sort_connections

from .fixtures import (
    MINIMAL_OPENAPI_SPEC,
    OAUTH2_NO_SCOPES_SCHEME,
    PETSTORE_SPEC,
    USERS_SPEC,
    load_document,
)

USERS_ACTIONS_TS = '''\
import { action, util } from "@prismatic-io/spectral";
import { createClient } from "../client";

const getUser = action({
  display: {
    label: "Get User",
    description: "Get a user",
  },
  perform: async (context, { connection, userId }) => {
    const client = createClient(connection);
    const { data } = await client.get(`/users/${userId}`);
    return { data };
  },
  inputs: {
    connection: {
      label: "Connection",
      type: "connection",
      required: true,
    },
    userId: {
      label: "User Id",
      type: "string",
      required: true,
      clean: (value) => util.types.toString(value) || undefined,
    },
  },
});

export default {
  getUser,
};
'''

USERS_INDEX_TS = '''\
import { component } from "@prismatic-io/spectral";
import { handleErrors } from "@prismatic-io/spectral/dist/clients/http";
import actions from "./actions";
import connections from "./connections";

export default component({
  key: "usersApi",
  display: {
    label: "Users API",
    description: "Manage users",
    category: "Application Connectors",
    iconPath: "icon.png",
  },
  hooks: { error: handleErrors },
  actions,
  connections,
});
'''

USERS_ACTIONS_INDEX_TS = '''\
import { buildRawRequestAction } from "@prismatic-io/spectral/dist/clients/http";
import { baseUrl } from "../client";
import users from "./users";

export default {
  ...users,
  rawRequest: buildRawRequestAction(baseUrl),
};
'''

USERS_CONNECTIONS_TS = '''\
import { connection } from "@prismatic-io/spectral";

export const apiKeyAuth = connection({
  key: "apiKeyAuth",
  label: "Api Key Auth",
  inputs: {
    apiKey: {
      label: "X-Api-Key",
      type: "password",
      required: true,
    },
  },
});

export default [apiKeyAuth];
'''


@pytest.fixture
def users_result() -> Result:
    return assemble(load_document(USERS_SPEC))


@pytest.fixture
def petstore_artifacts() -> dict[str, str]:
    return render('petstore', assemble(load_document(PETSTORE_SPEC)))


def perform_call(path: str, verb: str, operation: Operation) -> str:
    action, _ = build_action(path, verb, operation)
    source = build_action_group('group', [action]).render()
    return next(line.strip() for line in source.splitlines() if 'await' in line)


class TestRender:
    """Rendering a Result into artifacts."""

    def test_artifact_paths(self, users_result):
        artifacts = render('usersApi', users_result)

        assert list(artifacts) == [
            'src/connections.ts',
            'src/actions/users.ts',
            'src/actions/index.ts',
            'src/client.ts',
            'src/index.ts',
        ]

    def test_action_group_module(self, users_result):
        artifacts = render('usersApi', users_result)

        assert artifacts['src/actions/users.ts'] == USERS_ACTIONS_TS

    def test_actions_index(self, users_result):
        artifacts = render('usersApi', users_result)

        assert artifacts['src/actions/index.ts'] == USERS_ACTIONS_INDEX_TS

    def test_component_manifest(self, users_result):
        artifacts = render('usersApi', users_result)

        assert artifacts['src/index.ts'] == USERS_INDEX_TS

    def test_connections_module(self, users_result):
        artifacts = render('usersApi', users_result)

        assert artifacts['src/connections.ts'] == USERS_CONNECTIONS_TS

    def test_category(self, users_result):
        artifacts = render('usersApi', users_result, category='Data Platforms')

        assert 'category: "Data Platforms",' in artifacts['src/index.ts']

    def test_deterministic(self):
        first = render('petstore', assemble(load_document(PETSTORE_SPEC)))
        second = render('petstore', assemble(load_document(PETSTORE_SPEC)))

        assert first == second

    def test_every_artifact_ends_with_newline(self, petstore_artifacts):
        assert all(content.endswith('\n') for content in petstore_artifacts.values())


class TestClientModule:
    """src/client.ts."""

    def test_base_url_and_connection_keys(self, users_result):
        client = render('usersApi', users_result)['src/client.ts']

        assert client.startswith(
            'import { Connection, ConnectionError, util } from "@prismatic-io/spectral";\n'
            'import { HttpClient, createClient as createHttpClient } from '
            '"@prismatic-io/spectral/dist/clients/http";\n'
            'import { apiKeyAuth } from "./connections";\n'
        )
        assert 'export const baseUrl = "https://api.example.com/v1";' in client
        assert 'const connectionKeys: string[] = [apiKeyAuth.key];' in client

    def test_create_client(self, petstore_artifacts):
        client = petstore_artifacts['src/client.ts']

        assert 'export const createClient = (connection: Connection): HttpClient => {' in client
        assert 'throw new ConnectionError(' in client
        assert 'Accept: "application/json",' in client
        assert 'responseType: "json",' in client
        assert (
            'const connectionKeys: string[] = '
            '[petstoreAuth.key, basicAuth.key, bearerAuth.key];'
        ) in client

    def test_authorization_headers(self, petstore_artifacts):
        client = petstore_artifacts['src/client.ts']

        assert 'const toAuthorizationHeaders = (connection: Connection)' in client
        assert 'return { Authorization: `Bearer ${accessToken}` };' in client
        assert 'return { Authorization: `Bearer ${apiKey}` };' in client
        assert 'return { Authorization: `Basic ${encoded}` };' in client

    def test_no_connections(self):
        artifacts = render('minimal', assemble(load_document(MINIMAL_OPENAPI_SPEC)))

        assert './connections' not in artifacts['src/client.ts']
        assert 'const connectionKeys: string[] = [];' in artifacts['src/client.ts']
        assert artifacts['src/connections.ts'] == 'export default [];\n'


class TestConnectionsModule:
    """src/connections.ts."""

    def test_imports(self, petstore_artifacts):
        connections = petstore_artifacts['src/connections.ts']

        assert connections.splitlines()[0] == (
            'import { OAuth2Type, connection, oauth2Connection } from "@prismatic-io/spectral";'
        )

    def test_default_export_by_priority(self, petstore_artifacts):
        connections = petstore_artifacts['src/connections.ts']

        assert connections.endswith('export default [petstoreAuth, bearerAuth, basicAuth];\n')

    def test_oauth2_connection(self, petstore_artifacts):
        connections = petstore_artifacts['src/connections.ts']

        assert 'export const petstoreAuth = oauth2Connection({' in connections
        assert 'oauth2Type: OAuth2Type.AuthorizationCode,' in connections
        assert 'default: "https://petstore.example.com/oauth/token",' in connections
        assert 'comments: "Basic authentication",' in connections

    def test_empty_scopes_default(self):
        spec = {
            **MINIMAL_OPENAPI_SPEC,
            'components': {'securitySchemes': {'oauth': OAUTH2_NO_SCOPES_SCHEME}},
        }

        connections = render('x', assemble(load_document(spec)))['src/connections.ts']

        assert 'default: "",' in connections
        assert 'import { OAuth2Type, oauth2Connection } from' in connections

    def test_sort_is_stable(self):
        result = assemble(load_document(PETSTORE_SPEC))
        duplicated = result.connections + result.connections

        ordered = sort_connections(duplicated)

        assert [c.key for c in ordered] == [
            'petstoreAuth',
            'petstoreAuth',
            'bearerAuth',
            'bearerAuth',
            'basicAuth',
            'basicAuth',
        ]


class TestActionModules:
    """src/actions/*.ts."""

    def test_group_modules(self, petstore_artifacts):
        assert 'src/actions/pets.ts' in petstore_artifacts
        assert 'src/actions/twoFa.ts' in petstore_artifacts
        assert petstore_artifacts['src/actions/twoFa.ts'].endswith(
            'export default {\n  verify,\n};\n'
        )

    def test_query_call(self, petstore_artifacts):
        pets = petstore_artifacts['src/actions/pets.ts']

        assert (
            'const { data } = await client.get(`/pets`, { params: { limit, status } });'
            in pets
        )

    def test_body_call(self, petstore_artifacts):
        pets = petstore_artifacts['src/actions/pets.ts']

        assert (
            'const { data } = await client.post(`/pets`, { name, tag, vaccinated });'
            in pets
        )

    def test_path_call(self, petstore_artifacts):
        pets = petstore_artifacts['src/actions/pets.ts']

        assert 'perform: async (context, { connection, petId }) => {' in pets
        assert 'const { data } = await client.delete(`/pets/${petId}`);' in pets

    def test_enum_model(self, petstore_artifacts):
        pets = petstore_artifacts['src/actions/pets.ts']

        assert '      model: [\n' in pets
        assert '{ label: "Available", value: "available" },' in pets
        assert 'comments: "Filter by status",' in pets

    def test_description_is_first_sentence(self, petstore_artifacts):
        pets = petstore_artifacts['src/actions/pets.ts']

        assert 'description: "Create a pet",' in pets
        assert 'description: "DELETE /pets/{pet-id}",' in pets

    def test_clean_functions(self, petstore_artifacts):
        pets = petstore_artifacts['src/actions/pets.ts']

        assert 'clean: (value) => util.types.toNumber(value),' in pets
        assert 'clean: (value) => util.types.toBool(value),' in pets
        assert 'default: "20",' in pets
        assert 'example: "dog",' in pets

    def test_renamed_query_parameter(self):
        operation = Operation.model_validate(
            {'operationId': 'listItems', 'parameters': [{'name': 'page_size', 'in': 'query'}]}
        )

        call = perform_call('/items', 'get', operation)

        assert call == (
            'const { data } = await client.get(`/items`, { params: { "page_size": pageSize } });'
        )

    def test_empty_body(self):
        call = perform_call('/items', 'post', Operation(operationId='createItem'))

        assert call == 'const { data } = await client.post(`/items`, {});'

    def test_trace_uses_request(self):
        call = perform_call('/items', 'trace', Operation(operationId='traceItems'))

        assert call == (
            'const { data } = await client.request({ method: "trace", url: `/items` });'
        )

    def test_input_named_like_client_factory(self):
        operation = Operation.model_validate(
            {
                'operationId': 'createNode',
                'requestBody': {
                    'content': {
                        'application/json': {
                            'schema': {'properties': {'createClient': {'type': 'string'}}}
                        }
                    }
                },
            }
        )
        action, _ = build_action('/nodes', 'post', operation)

        source = build_action_group('nodes', [action]).render()

        assert 'perform: async (context, { connection, otherCreateClient }) => {' in source
        assert 'const client = createClient(connection);' in source
        assert 'client.post(`/nodes`, { "createClient": otherCreateClient })' in source

    def test_index_aliases_bound_names(self):
        index = build_actions_index(['users', 'baseUrl']).render()

        assert 'import baseUrlGroup from "./baseUrl";' in index
        assert '...baseUrlGroup,' in index
        assert '...users,' in index


class TestEmitters:
    """Writing artifacts."""

    def test_write_files(self, tmp_path, users_result):
        written = write('usersApi', users_result, tmp_path)

        assert len(written) == 5
        content = (tmp_path / 'src' / 'actions' / 'users.ts').read_text()
        assert content == USERS_ACTIONS_TS
        assert not [p for p in tmp_path.iterdir() if p.name.startswith('.spectralgen-')]

    def test_overwrites_existing_files(self, tmp_path, users_result):
        target = tmp_path / 'src' / 'index.ts'
        target.parent.mkdir(parents=True)
        target.write_text('stale')

        write('usersApi', users_result, tmp_path)

        assert target.read_text() == USERS_INDEX_TS

    def test_output_is_a_file(self, tmp_path, users_result):
        output = tmp_path / 'not-a-directory'
        output.write_text('')

        with pytest.raises(EmissionIOError) as exc_info:
            write('usersApi', users_result, output)

        assert isinstance(exc_info.value.cause, OSError)
        assert output.read_text() == ''

    def test_failed_move_restores_previous_files(self, tmp_path):
        (tmp_path / 'src').mkdir()
        (tmp_path / 'src' / 'a.ts').write_text('old a\n')
        # A file where a directory is needed makes the last move fail.
        (tmp_path / 'src' / 'lib').write_text('')

        with pytest.raises(EmissionIOError):
            FileEmitter(tmp_path).emit(
                {'src/a.ts': 'new a\n', 'src/b.ts': 'new b\n', 'src/lib/c.ts': 'new c\n'}
            )

        assert (tmp_path / 'src' / 'a.ts').read_text() == 'old a\n'
        assert not (tmp_path / 'src' / 'b.ts').exists()
        assert (tmp_path / 'src' / 'lib').is_file()
        assert not [p for p in tmp_path.iterdir() if p.name.startswith('.spectralgen-')]

    def test_file_emitter_tracks_written_files(self, tmp_path):
        emitter = FileEmitter(tmp_path)

        emitter.emit({'src/a.ts': 'a\n'})
        emitter.emit({'src/b.ts': 'b\n'})

        assert [p.split('/')[-1] for p in emitter.get_written_files()] == ['a.ts', 'b.ts']

    def test_string_emitter(self, users_result):
        emitter = StringEmitter()

        paths = emitter.emit(render('usersApi', users_result))

        assert paths[0] == 'src/connections.ts'
        assert emitter.get_artifact('src/index.ts') == USERS_INDEX_TS
        assert emitter.get_artifact('src/missing.ts') is None
        assert len(emitter.get_all_artifacts()) == 5

    def test_write_async(self, tmp_path, users_result):
        written = asyncio.run(write_async('usersApi', users_result, tmp_path))

        assert len(written) == 5
        assert (tmp_path / 'src' / 'client.ts').exists()
