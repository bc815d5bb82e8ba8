"""Shared fixtures for the thread_archive test suite."""

import json
import os
from unittest.mock import patch

import pytest

from thread_archive.core.live_adapter import CommentContext
from thread_archive.tests.stubs.thread_stubs import PERMALINK, archive_submission, live_document


@pytest.fixture
def archive_document():
    return archive_submission()


@pytest.fixture
def live_thread_document():
    return live_document()


@pytest.fixture
def comment_context():
    return CommentContext(post_link=PERMALINK, post_author="op_user")


@pytest.fixture
def clean_env():
    """Keep variables loaded from .env files inside a single test."""
    with patch.dict(os.environ, {}, clear=False):
        for key in list(os.environ):
            if key.startswith("THREAD_ARCHIVE_"):
                del os.environ[key]
        yield


@pytest.fixture
def source_dir(tmp_path):
    """
    Input directory with two valid archives, one invalid file, a non-JSON
    file and a hidden directory that must be skipped.
    """
    source = tmp_path / "source"
    nested = source / "nested"
    hidden = source / ".cache"
    nested.mkdir(parents=True)
    hidden.mkdir()

    (source / "first.json").write_text(json.dumps(archive_submission()), encoding="utf-8")
    (nested / "second.json").write_text(
        json.dumps(archive_submission(id="def456", title="Second thread", comments=[])),
        encoding="utf-8",
    )
    (source / "broken.json").write_text("{not json", encoding="utf-8")
    (source / "notes.txt").write_text("ignored", encoding="utf-8")
    (hidden / "skipped.json").write_text(json.dumps(archive_submission(id="zzz999")), encoding="utf-8")
    return source
