"""Intermediate representation produced by the reader and consumed by the writer.

The ``Result`` tree is built once per generation run and never mutated: all
nodes are frozen pydantic models and collections are tuples. Optional fields
are ``None`` when absent, and blank or empty values are turned into ``None``
when a node is built, so an unset field has a single representation. The
writers emit a field only when it is not ``None``; ``IRNode.normalized``
gives the same view of a node as a plain dict.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    'Action',
    'ActionDisplay',
    'CleanFunction',
    'Component',
    'ComponentDisplay',
    'Connection',
    'ConnectionInput',
    'IRNode',
    'Input',
    'InputChoice',
    'KeyMapping',
    'OAuth2Type',
    'PerformPlan',
    'Result',
]


class IRNode(BaseModel):
    """Base class of every IR node."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    def normalized(self) -> dict[str, Any]:
        """Return the node as a dict with every unset optional field omitted."""
        return self.model_dump(mode='json', exclude_none=True)


class OAuth2Type(str, Enum):
    AUTHORIZATION_CODE = 'AuthorizationCode'
    CLIENT_CREDENTIALS = 'ClientCredentials'


class InputChoice(IRNode):
    label: str
    value: str


class CleanFunction(IRNode):
    """A ``util.types`` conversion applied to an input value.

    Attributes:
        name: The conversion function, e.g. ``toString``.
        coalesce: Whether a falsy converted value becomes ``undefined``.
    """

    name: str
    coalesce: bool = False


class Input(IRNode):
    upstream_key: str
    key: str
    label: str
    type: str
    required: bool | None = None
    comments: str | None = None
    default: str | None = None
    example: str | None = None
    model: tuple[InputChoice, ...] | None = None
    clean: CleanFunction | None = None

    @field_validator('comments')
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return value if value and value.strip() else None

    @field_validator('model')
    @classmethod
    def _empty_model_to_none(cls, value):
        return value or None


class ConnectionInput(IRNode):
    label: str
    type: str
    required: bool | None = None
    shown: bool | None = None
    default: str | None = None
    comments: str | None = None
    placeholder: str | None = None
    example: str | None = None


class KeyMapping(IRNode):
    """Maps a sanitized input key back to the key the upstream API expects."""

    key: str
    upstream_key: str

    @property
    def is_renamed(self) -> bool:
        return self.key != self.upstream_key


class PerformPlan(IRNode):
    """Structured description of an action's perform function.

    Attributes:
        verb: The HTTP client method to call (``get``, ``post``...).
        path: URL template in interpolation form, e.g. ``/users/${userId}``.
        arguments: Input keys destructured from the perform parameters.
        body: Body object mapping; present for post, put and patch.
        query: Query params mapping; present when there are query inputs.
    """

    verb: str
    path: str
    arguments: tuple[str, ...] = ()
    body: tuple[KeyMapping, ...] | None = None
    query: tuple[KeyMapping, ...] | None = None


class ActionDisplay(IRNode):
    label: str
    description: str


class Action(IRNode):
    key: str
    group_tag: str
    display: ActionDisplay
    inputs: dict[str, Input]
    perform: PerformPlan


class Connection(IRNode):
    key: str
    label: str
    inputs: dict[str, ConnectionInput]
    order_priority: int = Field(..., ge=0)
    comments: str | None = None
    oauth2_type: OAuth2Type | None = None


class ComponentDisplay(IRNode):
    label: str
    description: str
    icon_path: str = 'icon.png'


class Component(IRNode):
    display: ComponentDisplay


class Result(IRNode):
    base_url: str
    component: Component
    actions: tuple[Action, ...] = ()
    connections: tuple[Connection, ...] = ()
