"""Orchestration of a full generation run for one configured document."""

import logging

from spectralgen.config import DocumentConfig
from spectralgen.ir import Result
from spectralgen.reader.assembler import assemble
from spectralgen.reader.loader import SchemaLoader
from spectralgen.writer.emitter import CodeEmitter, FileEmitter, render

logger = logging.getLogger(__name__)

__all__ = ['ComponentGenerator']


class ComponentGenerator:
    """Reads one OpenAPI document and emits its component sources.

    Nothing is written until the whole document has been read and every
    artifact rendered; any error aborts the run before output is touched.

    Example:
        >>> config = DocumentConfig(source='./openapi.yaml', output='./petstore')
        >>> ComponentGenerator(config).generate()
        ['petstore/src/connections.ts', ...]
    """

    def __init__(self, config: DocumentConfig, emitter: CodeEmitter | None = None):
        """Initialize the generator.

        Args:
            config: The document configuration.
            emitter: Where artifacts go; defaults to files below ``config.output``.
        """
        self.config = config
        self.emitter = emitter or FileEmitter(config.output)
        self._loader = SchemaLoader(resolve_external_refs=config.resolve_external_refs)
        self.key: str | None = None

    def read(self) -> Result:
        """Load the configured document and assemble its Result."""
        document = self._loader.load(self.config.source)
        self.key = self.config.component_key(document.info.title)
        return assemble(
            document, base_url=self.config.base_url, icon_path=self.config.icon_path
        )

    def render(self, result: Result) -> dict[str, str]:
        key = self.key or self.config.component_key(result.component.display.label)
        return render(key, result, self.config.category)

    def generate(self) -> list[str]:
        """Run the pipeline and emit every artifact.

        Returns:
            Identifiers of the emitted artifacts.

        Raises:
            SpectralGenError: If reading, assembling or writing fails.
        """
        logger.info(f'Generating component from {self.config.source}')
        result = self.read()
        artifacts = self.render(result)
        return self.emitter.emit(artifacts)
