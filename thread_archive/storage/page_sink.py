"""Output sinks for generated pages."""

import logging
import os
import shutil
from pathlib import Path
from typing import Protocol, Union

from thread_archive.core.render import ArchiveIndex, PostPage

logger = logging.getLogger(__name__)


class PageSink(Protocol):
    """
    A protocol that defines the interface for page output backends.

    The site generator only depends on this interface, so a templating
    renderer can replace the JSON sink without touching the decode path.
    """

    extension: str

    def write_page(self, path: Path, page: PostPage) -> None:
        """Write one thread page to ``path``."""
        ...

    def write_index(self, out_dir: Path, index: ArchiveIndex) -> Path:
        """Write the aggregate index into ``out_dir`` and return its path."""
        ...


class JsonPageSink:
    """Writes pages as JSON documents for an external renderer."""

    extension = "json"
    index_name = "index"

    def __init__(self, indent: int = 2):
        self.indent = indent

    def write_page(self, path: Path, page: PostPage) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(page.model_dump_json(indent=self.indent), encoding="utf-8")
        logger.debug(f"Wrote page {path}")

    def write_index(self, out_dir: Path, index: ArchiveIndex) -> Path:
        path = Path(out_dir) / f"{self.index_name}.{self.extension}"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(index.model_dump_json(indent=self.indent), encoding="utf-8")
        logger.info(f"Wrote index with {len(index.posts)} posts to {path}")
        return path


def copy_static(static_dir: Union[str, os.PathLike], out_dir: Union[str, os.PathLike]) -> None:
    """
    Copy a static asset directory into the output directory.

    Raises:
        FileNotFoundError: If ``static_dir`` does not exist
    """
    if not os.path.isdir(static_dir):
        raise FileNotFoundError(f"Source directory does not exist: {static_dir}")
    shutil.copytree(static_dir, out_dir, dirs_exist_ok=True)
    logger.info(f"Copied static files from {static_dir} to {out_dir}")
