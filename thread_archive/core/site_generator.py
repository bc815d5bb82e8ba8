"""
Batch static-site generation from a directory of thread JSON files.

Each input file becomes one page; a malformed file is logged and recorded in
the report without stopping the run. Pages are keyed by output path, so two
inputs with the same file stem silently overwrite one another.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from thread_archive.config.settings import Config
from thread_archive.core.input_format import InputFormat, decode_document, resolve_input_format
from thread_archive.core.render import PostPage, archive_post_page, build_index, output_path
from thread_archive.errors import DecodeError, NodeDecodeError
from thread_archive.storage.page_sink import JsonPageSink, PageSink, copy_static

logger = logging.getLogger(__name__)


def json_paths_recursive(path: Union[str, Path]) -> List[Path]:
    """
    Resolve paths of all JSON files in a directory and its subdirectories.

    Hidden directories (name starting with ".") are skipped. Results are
    sorted so runs are reproducible.
    """
    paths = []
    for entry in sorted(Path(path).iterdir()):
        if entry.is_dir():
            if not entry.name.startswith("."):
                paths.extend(json_paths_recursive(entry))
        elif entry.suffix == ".json":
            paths.append(entry)
    return paths


@dataclass
class DocumentFailure:
    path: Path
    error: str


@dataclass
class GenerationReport:
    """Outcome of a generator run."""

    pages: List[Path] = field(default_factory=list)
    index_path: Optional[Path] = None
    failures: List[DocumentFailure] = field(default_factory=list)
    node_errors: Dict[Path, List[NodeDecodeError]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class SiteGenerator:
    """Builds a static archive from the JSON files under ``config.source``."""

    def __init__(self, config: Config, sink: Optional[PageSink] = None):
        """
        Initialize the generator.

        Args:
            config: Application configuration (source, output, input format...)
            sink: Output backend; defaults to JSON files

        Raises:
            UnsupportedInputFormatError: If the configured input format cannot be decoded
        """
        self.config = config
        self.sink = sink or JsonPageSink()
        self.input_format: InputFormat = resolve_input_format(config.input_format)
        self.out_dir = Path(config.output)

    def create_page(self, input_path: Path) -> Tuple[Path, PostPage, List[NodeDecodeError]]:
        """
        Decode one input file into its output path and page.

        Raises:
            DecodeError: If the file is not valid JSON or does not match the input format
        """
        out_path = output_path(input_path, self.out_dir, self.sink.extension)

        try:
            with open(input_path, "r", encoding="utf-8") as file:
                document = json.load(file)
        except json.JSONDecodeError as e:
            raise DecodeError(f"invalid JSON: {e}", source=str(input_path)) from e

        thread = decode_document(
            self.input_format,
            document,
            source=str(input_path),
            options=self.config.decode_options(),
        )
        page = archive_post_page(thread.post, thread.comments, out_path, self.config.preferences)
        return out_path, page, thread.errors

    def create_pages(self, paths: List[Path], report: GenerationReport) -> Dict[Path, PostPage]:
        pages: Dict[Path, PostPage] = {}
        for input_path in paths:
            logger.debug(f"Creating page for {input_path}")
            try:
                out_path, page, node_errors = self.create_page(input_path)
            except (DecodeError, OSError, ValueError) as e:
                logger.error(f"Skipping {input_path}: {e}")
                report.failures.append(DocumentFailure(path=input_path, error=str(e)))
                continue

            if node_errors:
                report.node_errors[input_path] = node_errors
            if out_path in pages:
                logger.debug(f"{input_path} overwrites an earlier page at {out_path}")
            pages[out_path] = page
        return pages

    def run(self) -> GenerationReport:
        """
        Generate the site.

        Returns:
            GenerationReport listing written pages and per-document failures
        """
        report = GenerationReport()
        source = Path(self.config.source)

        logger.info(f"Indexing input files in {source}")
        paths = json_paths_recursive(source)
        logger.info(f"Found {len(paths)} JSON files ({self.input_format})")

        pages = self.create_pages(paths, report)

        self.out_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Writing {len(pages)} pages to {self.out_dir}")
        for path, page in pages.items():
            self.sink.write_page(path, page)
            report.pages.append(path)

        index = build_index(
            (page.post for page in pages.values()),
            self.config.site.title,
            self.config.site.description,
            self.config.preferences,
        )
        report.index_path = self.sink.write_index(self.out_dir, index)

        if self.config.static_dir:
            copy_static(self.config.static_dir, self.out_dir / os.path.basename(os.path.normpath(self.config.static_dir)))

        if report.failures:
            logger.warning(f"{len(report.failures)} of {len(paths)} documents could not be decoded")
        logger.info(f"Site generated at {self.out_dir}")
        return report
