"""Shared fixtures for techdocs tests."""

from pathlib import Path

import pytest
from loguru import logger

from techdocs.contexts.configuring.config import RESOURCES_PATH, BuildConfig

DEFAULT_STYLESHEET = RESOURCES_PATH / "styles" / "default.css"


def _write_conf(project_dir: Path, **settings) -> Path:
    lines = [f'{key}="{value}"' for key, value in settings.items()]
    conf = project_dir / "techdocs.conf"
    conf.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return conf


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop sinks added by a test so later tests never write to closed streams."""
    yield
    logger.remove()


@pytest.fixture
def write_conf():
    """Writes a techdocs.conf with the given KEY=value settings."""
    return _write_conf


@pytest.fixture
def project_dir(tmp_path):
    """Minimal project: techdocs.conf and a master document."""
    project = tmp_path / "project"
    project.mkdir()
    _write_conf(project, PROJECT_NAME="Test Docs")
    (project / "master.md").write_text("# Hello {#hello}\n\nWorld.\n", encoding="utf-8")
    return project


@pytest.fixture
def make_config(tmp_path):
    """Factory for BuildConfig objects rooted in tmp_path without a config file."""

    def _make(**fields) -> BuildConfig:
        values = dict(
            project_dir=tmp_path,
            format="html",
            master_file=tmp_path / "master.md",
            output_file_name_base="documentation",
            output_dir=tmp_path / "output",
            project_name="Test Docs",
            stylesheet=DEFAULT_STYLESHEET,
        )
        values.update(fields)
        return BuildConfig(**values)

    return _make
