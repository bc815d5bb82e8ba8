"""Command-line interface for the thread archive generator."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import typer
from typing_extensions import Annotated

from thread_archive.config import Config
from thread_archive.core.archive_adapter import encode_submission
from thread_archive.core.comment_tree import build_comment_tree, search_comment_forest
from thread_archive.core.input_format import InputFormat, decode_document, resolve_input_format
from thread_archive.core.live_adapter import CommentContext, decode_live_post, split_document
from thread_archive.core.site_generator import SiteGenerator
from thread_archive.errors import DecodeError, ThreadArchiveError
from thread_archive.models.canonical import Comment
from thread_archive.utils.logging_utils import setup_logging

app = typer.Typer(help="Thread Archive - Turn saved discussion threads into static pages")

logger = logging.getLogger(__name__)


def load_config(
    config_path: str,
    source: Optional[str] = None,
    output: Optional[str] = None,
    input_format: Optional[str] = None,
) -> Config:
    """Load configuration from files and apply command-line overrides."""
    config = Config.from_files(config_path)
    if source:
        config.source = source
    if output:
        config.output = output
    if input_format:
        config.input_format = input_format
    return config


def read_document(path: Path) -> Any:
    """
    Read one JSON document.

    Raises:
        DecodeError: If the file is not valid JSON
    """
    try:
        with open(path, "r", encoding="utf-8") as file:
            return json.load(file)
    except json.JSONDecodeError as e:
        raise DecodeError(f"invalid JSON: {e}", source=str(path)) from e


def search_document(document: Any, input_format: InputFormat, query: str, config: Config) -> List[Comment]:
    """Return the comments of one document whose body contains ``query``."""
    if input_format == InputFormat.REDDIT_JSON:
        post_thing, listing = split_document(document)
        post = decode_live_post(post_thing)
        context = CommentContext(
            post_link=post.permalink,
            post_author=post.author.name,
            filters=config.filters,
            prefs=config.preferences,
            pushshift_frontend=config.pushshift_frontend,
        )
        return build_comment_tree(listing, context, query).comments

    thread = decode_document(input_format, document, options=config.decode_options())
    return search_comment_forest(thread.comments, query)


@app.command()
def generate(
    source: Annotated[Optional[str], typer.Option("--source", "-s", help="Directory of JSON files to read")] = None,
    output: Annotated[Optional[str], typer.Option("--output", "-o", help="Directory to write pages to")] = None,
    input_format: Annotated[Optional[str], typer.Option("--input-format", "-f", help="Input format (bdfr-self-post or reddit-json)")] = None,
    config: Annotated[str, typer.Option("--config", "-c", help="Path to configuration file")] = "config.yaml",
    strict: Annotated[bool, typer.Option("--strict", help="Exit non-zero if any document fails to decode")] = False,
    loglevel: Annotated[Optional[str], typer.Option("--loglevel", "-l", help="Logging level")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose output")] = False,
) -> None:
    """
    Generate a static archive from a directory of saved threads.

    Writes one page per input file plus an index.
    """
    config_obj = load_config(config, source, output, input_format)

    log_level = "DEBUG" if verbose else (loglevel or config_obj.log_level)
    setup_logging(log_level, config_obj.log_file)

    validation_errors = config_obj.validate(require_source=True)
    if validation_errors:
        for error in validation_errors:
            logger.error(f"Configuration error: {error}")
        logger.critical("Invalid configuration, aborting")
        sys.exit(1)

    logger.info(f"Generating archive from {config_obj.source} ({config_obj.input_format})")

    try:
        report = SiteGenerator(config_obj).run()
    except ThreadArchiveError as e:
        logger.critical(f"Generation failed: {e}")
        sys.exit(1)

    typer.echo(f"Wrote {len(report.pages)} pages and {report.index_path}")

    recovered = sum(len(errors) for errors in report.node_errors.values())
    if recovered:
        logger.warning(f"Recovered from {recovered} bad comment nodes")

    if report.failures:
        for failure in report.failures:
            typer.echo(f"Failed: {failure.path}: {failure.error}", err=True)
        if strict:
            sys.exit(2)


@app.command()
def search(
    file: Annotated[Path, typer.Argument(help="Thread JSON file")],
    query: Annotated[str, typer.Argument(help="Case-insensitive text to look for in comment bodies")],
    input_format: Annotated[Optional[str], typer.Option("--input-format", "-f", help="Input format (bdfr-self-post or reddit-json)")] = None,
    config: Annotated[str, typer.Option("--config", "-c", help="Path to configuration file")] = "config.yaml",
    as_json: Annotated[bool, typer.Option("--json", help="Print matches as JSON")] = False,
) -> None:
    """
    Search the comments of one thread.

    Matches are printed as a flat list, replies before the comments they answer.
    """
    config_obj = load_config(config, input_format=input_format)
    setup_logging(config_obj.log_level)

    try:
        fmt = resolve_input_format(config_obj.input_format)
        document = read_document(file)
        matches = search_document(document, fmt, query, config_obj)
    except (ThreadArchiveError, OSError) as e:
        logger.error(f"Search failed: {e}")
        sys.exit(1)

    if as_json:
        typer.echo(json.dumps([match.model_dump(mode="json") for match in matches], indent=2))
        return

    for match in matches:
        typer.echo(f"{match.id}\t{match.author.name}\t{match.body}")
    typer.echo(f"{len(matches)} matching comments", err=True)


@app.command()
def export(
    file: Annotated[Path, typer.Argument(help="Thread JSON file")],
    input_format: Annotated[Optional[str], typer.Option("--input-format", "-f", help="Input format (bdfr-self-post or reddit-json)")] = None,
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Output file (default: stdout)")] = None,
    config: Annotated[str, typer.Option("--config", "-c", help="Path to configuration file")] = "config.yaml",
) -> None:
    """
    Convert one thread to the archival (bulk-downloader) format.

    Fields the archival format has no place for are dropped.
    """
    config_obj = load_config(config, input_format=input_format)
    setup_logging(config_obj.log_level)

    try:
        fmt = resolve_input_format(config_obj.input_format)
        thread = decode_document(fmt, read_document(file), source=str(file), options=config_obj.decode_options())
    except (ThreadArchiveError, OSError) as e:
        logger.error(f"Export failed: {e}")
        sys.exit(1)

    output_text = json.dumps(encode_submission(thread.post, thread.comments), indent=2)

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(output_text)
        logger.info(f"Exported {thread.post.id} to {out}")
    else:
        typer.echo(output_text)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
