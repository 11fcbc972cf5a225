"""Pydantic models for the parts of an OpenAPI v3/v3.1 document the reader consumes.

Every position that may hold a ``$ref`` is modelled as a tagged union of
``Reference`` and the inline object, discriminated on the presence of the
``$ref`` key. After dereferencing, a ``Reference`` can only survive where a
reference could not be resolved; the reader treats any ``Reference`` it meets
as an ``UnresolvedReferenceError`` via ``resolved``.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    model_validator,
)

from spectralgen.exceptions import UnresolvedReferenceError

__all__ = [
    'Components',
    'Document',
    'HTTP_VERBS',
    'Info',
    'MediaType',
    'OAuthFlow',
    'OAuthFlows',
    'Operation',
    'Parameter',
    'PathItem',
    'Reference',
    'RequestBody',
    'Schema',
    'SecurityScheme',
    'Server',
    'resolved',
]

HTTP_VERBS = ('get', 'put', 'post', 'delete', 'options', 'head', 'patch', 'trace')


def _node_kind(value: Any) -> str:
    """Discriminator function telling a $ref node apart from an inline object."""
    if isinstance(value, dict):
        return 'reference' if '$ref' in value else 'inline'
    return 'reference' if isinstance(value, Reference) else 'inline'


class Reference(BaseModel):
    model_config = ConfigDict(extra='allow', populate_by_name=True)

    ref: str = Field(..., alias='$ref')


class Schema(BaseModel):
    model_config = ConfigDict(extra='allow')

    title: Optional[str] = None
    type: Optional[Union[str, List[str]]] = None
    description: Optional[str] = None
    enum: Optional[List[Any]] = None
    default: Optional[Any] = None
    example: Optional[Any] = None
    required: Optional[List[str]] = None
    readOnly: Optional[bool] = False
    allOf: Optional[List[SchemaNode]] = None
    properties: Optional[Dict[str, SchemaNode]] = None
    items: Optional[SchemaNode] = None

    @model_validator(mode='wrap')
    @classmethod
    def share_validated(
        cls, data: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Schema:
        """Validate a schema object that several references share only once.

        The dereferenced tree reuses one object per target; with a ``schemas``
        dict in the validation context each of them becomes a single Schema.
        """
        cache = (info.context or {}).get('schemas')
        if cache is None or not isinstance(data, dict):
            return handler(data)
        if id(data) not in cache:
            cache[id(data)] = (data, handler(data))
        return cache[id(data)][1]

    @property
    def primary_type(self) -> str | None:
        """The schema type; for OpenAPI 3.1 type lists, the first non-null entry."""
        if isinstance(self.type, list):
            return next((t for t in self.type if t != 'null'), None)
        return self.type


SchemaNode = Annotated[
    Union[Annotated[Reference, Tag('reference')], Annotated[Schema, Tag('inline')]],
    Discriminator(_node_kind),
]


class Parameter(BaseModel):
    model_config = ConfigDict(extra='allow', populate_by_name=True)

    name: str
    in_: str = Field(..., alias='in')
    description: Optional[str] = None
    required: Optional[bool] = None
    schema_: Optional[SchemaNode] = Field(None, alias='schema')


ParameterNode = Annotated[
    Union[Annotated[Reference, Tag('reference')], Annotated[Parameter, Tag('inline')]],
    Discriminator(_node_kind),
]


class MediaType(BaseModel):
    model_config = ConfigDict(extra='allow', populate_by_name=True)

    schema_: Optional[SchemaNode] = Field(None, alias='schema')


class RequestBody(BaseModel):
    model_config = ConfigDict(extra='allow')

    description: Optional[str] = None
    required: Optional[bool] = False
    content: Dict[str, MediaType] = Field(default_factory=dict)


RequestBodyNode = Annotated[
    Union[Annotated[Reference, Tag('reference')], Annotated[RequestBody, Tag('inline')]],
    Discriminator(_node_kind),
]


class Operation(BaseModel):
    model_config = ConfigDict(extra='allow')

    operationId: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    parameters: List[ParameterNode] = Field(default_factory=list)
    requestBody: Optional[RequestBodyNode] = None


class PathItem(BaseModel):
    model_config = ConfigDict(extra='allow')

    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: List[ParameterNode] = Field(default_factory=list)
    get: Optional[Operation] = None
    put: Optional[Operation] = None
    post: Optional[Operation] = None
    delete: Optional[Operation] = None
    options: Optional[Operation] = None
    head: Optional[Operation] = None
    patch: Optional[Operation] = None
    trace: Optional[Operation] = None

    def operations(self) -> list[tuple[str, Operation]]:
        """Return (verb, operation) pairs in HTTP_VERBS order."""
        return [
            (verb, getattr(self, verb))
            for verb in HTTP_VERBS
            if getattr(self, verb) is not None
        ]


class OAuthFlow(BaseModel):
    model_config = ConfigDict(extra='allow')

    authorizationUrl: Optional[str] = None
    tokenUrl: Optional[str] = None
    refreshUrl: Optional[str] = None
    scopes: Dict[str, str] = Field(default_factory=dict)


class OAuthFlows(BaseModel):
    model_config = ConfigDict(extra='allow')

    implicit: Optional[OAuthFlow] = None
    password: Optional[OAuthFlow] = None
    clientCredentials: Optional[OAuthFlow] = None
    authorizationCode: Optional[OAuthFlow] = None


class SecurityScheme(BaseModel):
    model_config = ConfigDict(extra='allow', populate_by_name=True)

    type: str
    description: Optional[str] = None
    name: Optional[str] = None
    in_: Optional[str] = Field(None, alias='in')
    scheme: Optional[str] = None
    bearerFormat: Optional[str] = None
    flows: Optional[OAuthFlows] = None
    openIdConnectUrl: Optional[str] = None


SecuritySchemeNode = Annotated[
    Union[
        Annotated[Reference, Tag('reference')],
        Annotated[SecurityScheme, Tag('inline')],
    ],
    Discriminator(_node_kind),
]


class Components(BaseModel):
    model_config = ConfigDict(extra='allow')

    securitySchemes: Dict[str, SecuritySchemeNode] = Field(default_factory=dict)


class Info(BaseModel):
    model_config = ConfigDict(extra='allow')

    title: str
    description: Optional[str] = None
    version: str = ''


class ServerVariable(BaseModel):
    model_config = ConfigDict(extra='allow')

    default: str
    enum: Optional[List[str]] = None
    description: Optional[str] = None


class Server(BaseModel):
    model_config = ConfigDict(extra='allow')

    url: str
    description: Optional[str] = None
    variables: Dict[str, ServerVariable] = Field(default_factory=dict)

    def resolved_url(self) -> str:
        """The server URL with every {variable} replaced by its default."""
        url = self.url
        for name, variable in self.variables.items():
            url = url.replace(f'{{{name}}}', variable.default)
        return url


class Document(BaseModel):
    model_config = ConfigDict(extra='allow')

    openapi: str
    info: Info
    servers: List[Server] = Field(default_factory=list)
    paths: Dict[str, PathItem] = Field(default_factory=dict)
    components: Optional[Components] = None
    # Swagger 2.0 leftovers some v3 documents still carry.
    basePath: Optional[str] = None


Schema.model_rebuild()
Parameter.model_rebuild()
MediaType.model_rebuild()
RequestBody.model_rebuild()
Operation.model_rebuild()
PathItem.model_rebuild()
Components.model_rebuild()
Document.model_rebuild()


T = TypeVar('T')


def resolved(node: Union[Reference, T], location: str) -> T:
    """Return an inline node, raising if it is still a $ref.

    Args:
        node: A node that may be a Reference.
        location: Human readable position of the node, used in the error.

    Raises:
        UnresolvedReferenceError: If the node is a Reference.
    """
    if isinstance(node, Reference):
        raise UnresolvedReferenceError(node.ref, location)
    return node
