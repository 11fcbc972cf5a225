"""Writer for ``src/index.ts``, the component manifest."""

from spectralgen.ir import Component
from spectralgen.utils import create_description
from spectralgen.writer.source import CodeWriter, SourceDocument, string_literal

__all__ = ['DEFAULT_CATEGORY', 'INDEX_PATH', 'build_component_document']

INDEX_PATH = 'src/index.ts'
DEFAULT_CATEGORY = 'Application Connectors'


def build_component_document(
    key: str, component: Component, category: str = DEFAULT_CATEGORY
) -> SourceDocument:
    """Build the manifest wiring actions, connections and the error hook."""
    document = SourceDocument(path=INDEX_PATH)
    document.imports.add_named('@prismatic-io/spectral', 'component')
    document.imports.add_named('@prismatic-io/spectral/dist/clients/http', 'handleErrors')
    document.imports.add_default('./actions', 'actions')
    document.imports.add_default('./connections', 'connections')

    display = component.display
    description = create_description(display.description) or display.label

    def default_export(writer: CodeWriter) -> None:
        with writer.block('component({', '})'):
            writer.line(f'key: {string_literal(key)},')
            with writer.block('display: {', '},'):
                writer.line(f'label: {string_literal(display.label)},')
                writer.line(f'description: {string_literal(description)},')
                writer.line(f'category: {string_literal(category)},')
                writer.line(f'iconPath: {string_literal(display.icon_path)},')
            writer.line('hooks: { error: handleErrors },')
            writer.line('actions,')
            writer.line('connections,')

    document.default_export = default_export
    return document
