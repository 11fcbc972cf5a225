import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from spectralgen.exceptions import ConfigurationError
from spectralgen.utils import clean_identifier

DEFAULT_FILENAMES = ['spectralgen.yaml', 'spectralgen.yml']

_ENV_REFERENCE = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')


class DocumentConfig(BaseModel):
    """Represents a single OpenAPI document to turn into a component."""

    source: str = Field(..., description='Path or URL to the OpenAPI document.')
    output: str = Field('.', description='Output directory for the generated component.')
    name: str | None = Field(
        None, description='Human readable component name; defaults to the document title.'
    )
    key: str | None = Field(
        None, description='Component key; derived from the name when not set.'
    )
    base_url: str | None = Field(
        None,
        description='Optional base URL to use if no servers are defined in the OpenAPI document.',
    )
    icon_path: str = Field('icon.png', description='Icon path of the component.')
    category: str = Field(
        'Application Connectors', description='Display category of the component.'
    )
    resolve_external_refs: bool = Field(
        True, description='Whether to load $ref targets in other files or URLs.'
    )

    def component_key(self, title: str) -> str:
        """The component key: ``key``, else derived from ``name`` or ``title``."""
        if self.key:
            return self.key
        return clean_identifier(self.name or title) or 'component'


class GeneratorConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='SPECTRALGEN_')

    documents: list[DocumentConfig] = Field(
        ..., description='List of OpenAPI documents to process.'
    )


def expand_env(value: Any, config_path: str | None = None) -> Any:
    """Replace ``${VAR}`` references in every string with environment values.

    Raises:
        ConfigurationError: If a referenced variable is not set.
    """
    if isinstance(value, dict):
        return {key: expand_env(item, config_path) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item, config_path) for item in value]
    if not isinstance(value, str):
        return value

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if name not in os.environ:
            raise ConfigurationError(
                f"Environment variable '{name}' is not set", config_path=config_path
            )
        return os.environ[name]

    return _ENV_REFERENCE.sub(substitute, value)


def load_yaml(path: str | Path) -> dict:
    """Load a YAML (or JSON) configuration file."""
    try:
        content = yaml.safe_load(Path(path).read_text(encoding='utf-8'))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f'Failed to read configuration: {e}', config_path=str(path))
    if not isinstance(content, dict):
        raise ConfigurationError('Configuration must be a mapping', config_path=str(path))
    return content


def _validate(content: dict, config_path: str) -> GeneratorConfig:
    try:
        return GeneratorConfig.model_validate(expand_env(content, config_path))
    except ValidationError as e:
        error = e.errors()[0]
        field = '.'.join(str(part) for part in error['loc'])
        raise ConfigurationError(
            f'Invalid configuration: {error["msg"]}', config_path=config_path, field=field
        )


def get_config(path: str | None = None) -> GeneratorConfig:
    """Load configuration from a file, the working directory or pyproject.toml.

    Raises:
        ConfigurationError: If no configuration is found or it is invalid.
    """
    if path:
        return _validate(load_yaml(path), path)

    cwd = Path(os.getcwd())
    for filename in DEFAULT_FILENAMES:
        candidate = cwd / filename
        if candidate.exists():
            return _validate(load_yaml(candidate), str(candidate))

    pyproject_path = cwd / 'pyproject.toml'
    if pyproject_path.exists():
        import tomllib

        pyproject = tomllib.loads(pyproject_path.read_text(encoding='utf-8'))
        tools = pyproject.get('tool', {})
        if 'spectralgen' in tools:
            return _validate(tools['spectralgen'], str(pyproject_path))

    raise ConfigurationError(
        'No configuration found; pass --config or create spectralgen.yaml'
    )
