import logging
import traceback
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from spectralgen.config import DocumentConfig, GeneratorConfig, get_config
from spectralgen.exceptions import ConfigurationError, SpectralGenError
from spectralgen.generator import ComponentGenerator

console = Console()
app = typer.Typer(
    name='spectralgen',
    help='Generate Spectral integration components from OpenAPI specifications',
    no_args_is_help=True,
)


def _resolve_config(
    config: str | None, openapi: str | None, name: str | None, output: str | None
) -> GeneratorConfig:
    if openapi is None:
        if name is not None or output is not None:
            raise ConfigurationError('--name and --output require --openapi')
        return get_config(config)

    if config is not None:
        raise ConfigurationError('--config cannot be combined with --openapi')
    return GeneratorConfig(
        documents=[DocumentConfig(source=openapi, name=name, output=output or '.')]
    )


@app.command()
def generate(
    config: Annotated[
        str | None,
        typer.Option(
            '--config', '-c', help='Path to configuration file (YAML or JSON)'
        ),
    ] = None,
    openapi: Annotated[
        str | None,
        typer.Option('--openapi', '-o', help='Path or URL of an OpenAPI document'),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option('--name', '-n', help='Component name (defaults to the API title)'),
    ] = None,
    output: Annotated[
        str | None,
        typer.Option('--output', help='Output directory of the component'),
    ] = None,
    verbose: Annotated[
        bool, typer.Option('--verbose', '-v', help='Enable debug logging')
    ] = False,
) -> None:
    """Generate component sources from an OpenAPI document.

    Without options, the configuration is read from spectralgen.yaml or the
    [tool.spectralgen] table of pyproject.toml in the current directory.

    Examples:
        spectralgen generate
        spectralgen generate --config my-config.yaml
        spectralgen generate --openapi ./petstore.yaml --name Petstore --output ./petstore
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s'
        )

    try:
        generator_config = _resolve_config(config, openapi, name, output)

        for document_config in generator_config.documents:
            with Progress(
                SpinnerColumn(),
                TextColumn('[progress.description]{task.description}'),
                console=console,
            ) as progress:
                task = progress.add_task(
                    f'Generating component for {document_config.source} in {document_config.output}...',
                    total=None,
                )

                written = ComponentGenerator(document_config).generate()

                progress.update(
                    task, description=f'Generation completed for {document_config.source}!'
                )
            console.print(
                f'[green]Successfully generated component from {document_config.source}[/green]'
            )
            console.print('[dim]Generated files:[/dim]')
            for path in written:
                console.print(f'  - {path}')

    except SpectralGenError as e:
        console.print(f'[red]Error:[/red] {escape(e.message)}')
        if verbose:
            traceback.print_exc()
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show the version of spectralgen."""
    from spectralgen import __version__

    console.print(f'spectralgen version: {__version__}')


if __name__ == '__main__':
    app()
