"""Artifact rendering and emitters for generated component sources.

``render`` turns a ``Result`` into a mapping of relative paths to file
contents without touching the filesystem. Emitters take that mapping and
output it: ``FileEmitter`` writes it under a destination directory,
``StringEmitter`` keeps it in memory.
"""

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from upath import UPath

from spectralgen.exceptions import EmissionIOError
from spectralgen.ir import Result
from spectralgen.writer.actions import build_action_documents
from spectralgen.writer.client import build_client_document
from spectralgen.writer.component import DEFAULT_CATEGORY, build_component_document
from spectralgen.writer.connections import build_connections_document

logger = logging.getLogger(__name__)

__all__ = [
    'CodeEmitter',
    'FileEmitter',
    'StringEmitter',
    'render',
    'write',
    'write_async',
]


def render(key: str, result: Result, category: str = DEFAULT_CATEGORY) -> dict[str, str]:
    """Render every artifact of a component.

    Args:
        key: The component key written into the manifest.
        result: The assembled IR.
        category: Display category of the component.

    Returns:
        Mapping of POSIX paths relative to the output root to file contents.
        The same inputs always produce the same mapping, byte for byte.
    """
    documents = [
        build_connections_document(result.connections),
        *build_action_documents(result.actions),
        build_client_document(result.base_url, result.connections),
        build_component_document(key, result.component, category),
    ]
    return {document.path: document.render() for document in documents}


class CodeEmitter(ABC):
    """Abstract base class for code emitters.

    A CodeEmitter takes rendered artifacts and outputs them in a specific
    way (files, strings, etc.).
    """

    @abstractmethod
    def emit(self, artifacts: dict[str, str]) -> list[str]:
        """Emit a set of rendered artifacts.

        Args:
            artifacts: Mapping of relative paths to file contents.

        Returns:
            Identifiers of the emitted artifacts (paths, for files).
        """
        pass


class FileEmitter(CodeEmitter):
    """Emits artifacts as files below an output directory.

    All artifacts are first written to a staging directory inside the
    output directory and then moved into place. Files replaced by a move are
    kept in the staging directory until every move succeeded; if one fails,
    the moved files are rolled back so the previous artifact set stays intact.
    """

    def __init__(self, output_dir: str | Path | UPath):
        """Initialize the file emitter.

        Args:
            output_dir: Directory where the ``src/`` tree will be written.
        """
        self.output_dir = UPath(output_dir)
        self._written_files: list[str] = []

    def emit(self, artifacts: dict[str, str]) -> list[str]:
        """Write artifacts below the output directory.

        Raises:
            EmissionIOError: If any filesystem operation fails. Files already
                moved into place are restored and the staging directory is
                removed before the error propagates.
        """
        staging = self.output_dir / f'.spectralgen-{uuid.uuid4().hex}'
        previous_dir = staging / 'previous'
        moved: list[tuple[UPath, UPath | None]] = []
        try:
            for relative_path, content in artifacts.items():
                staged = staging / 'next' / relative_path
                staged.parent.mkdir(parents=True, exist_ok=True)
                staged.write_text(content, encoding='utf-8')

            for relative_path in artifacts:
                destination = self.output_dir / relative_path
                destination.parent.mkdir(parents=True, exist_ok=True)
                previous = None
                if destination.exists():
                    previous = previous_dir / relative_path
                    previous.parent.mkdir(parents=True, exist_ok=True)
                    destination.replace(previous)
                moved.append((destination, previous))
                (staging / 'next' / relative_path).replace(destination)
        except OSError as e:
            self._roll_back(moved)
            raise EmissionIOError(str(self.output_dir), cause=e)
        finally:
            self._remove_staging(staging)

        written = [str(destination) for destination, _ in moved]
        for destination in written:
            logger.info(f'Wrote {destination}')
        self._written_files.extend(written)
        return written

    def get_written_files(self) -> list[str]:
        """Get list of all files written by this emitter."""
        return self._written_files.copy()

    @staticmethod
    def _roll_back(moved: list[tuple[UPath, UPath | None]]) -> None:
        for destination, previous in reversed(moved):
            try:
                if destination.exists():
                    destination.unlink()
                if previous is not None:
                    previous.replace(destination)
            except OSError as e:
                logger.warning(f'Failed to restore {destination}: {e}')

    @classmethod
    def _remove_staging(cls, path: UPath) -> None:
        try:
            cls._remove_tree(path)
        except OSError as e:
            logger.warning(f'Failed to remove staging directory {path}: {e}')

    @classmethod
    def _remove_tree(cls, path: UPath) -> None:
        if not path.exists():
            return
        for child in path.iterdir():
            if child.is_dir():
                cls._remove_tree(child)
            else:
                child.unlink()
        path.rmdir()


class StringEmitter(CodeEmitter):
    """Keeps emitted artifacts in memory.

    Useful for testing or when the generated sources are post-processed
    before being written.
    """

    def __init__(self):
        self._artifacts: dict[str, str] = {}

    def emit(self, artifacts: dict[str, str]) -> list[str]:
        self._artifacts.update(artifacts)
        return list(artifacts)

    def get_artifact(self, path: str) -> str | None:
        return self._artifacts.get(path)

    def get_all_artifacts(self) -> dict[str, str]:
        return self._artifacts.copy()


def write(
    key: str,
    result: Result,
    output: str | Path | UPath = '.',
    category: str = DEFAULT_CATEGORY,
) -> list[str]:
    """Render a component and write its artifacts below ``output``.

    Returns:
        Paths of the written files.

    Raises:
        EmissionIOError: If writing fails.
    """
    return FileEmitter(output).emit(render(key, result, category))


async def write_async(
    key: str,
    result: Result,
    output: str | Path | UPath = '.',
    category: str = DEFAULT_CATEGORY,
) -> list[str]:
    """Asynchronous variant of ``write``; the work runs in a worker thread."""
    return await asyncio.to_thread(write, key, result, output, category)
