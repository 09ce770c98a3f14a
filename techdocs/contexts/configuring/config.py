"""
Project Configuration

Loads techdocs.conf, a shell-style KEY=value file, and layers it over built-in
defaults and command-line overrides.

Examples:
    # Load a project's configuration as-is
    >>> config = load_config(Path("docs"))

    # Override the output format from the command line
    >>> config = load_config(Path("docs"), overrides={"FORMAT": "pdf"})
"""

import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from dotenv import dotenv_values, load_dotenv
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from techdocs.contexts.configuring.logger import _log_warning
from techdocs.exceptions import ConfigurationError, MissingInputError

load_dotenv()

CONFIG_FILE_NAME = "techdocs.conf"
STATE_DIR_NAME = ".techdocs"
IMAGES_DIR_NAME = "techdocs-images"
RESOURCES_PATH = Path(__file__).resolve().parents[2] / "resources"

FORMAT_DESCRIPTIONS = {
    "pdf": "PDF typeset by XeLaTeX",
    "html": "Multi-page HTML site, one page per top-level section",
    "htmlsinglepage": "Single self-contained HTML file",
    "md": "Single Markdown file with includes and diagrams expanded",
    "docx": "Microsoft Word document",
    "epub": "EPUB 3 e-book",
}
SUPPORTED_FORMATS = tuple(FORMAT_DESCRIPTIONS)
HTML_FORMATS = ("html", "htmlsinglepage")


@dataclass
class ConfigSchema:
    """Keys accepted in techdocs.conf and their defaults."""

    FORMAT: str = "html"
    MASTER_FILE: str = "master.md"
    OUTPUT_FILE_NAME_BASE: str = "documentation"
    OUTPUT_DIR: str = "output"
    PROJECT_NAME: str = "Documentation"
    AUTHOR: str = ""
    HTML_STYLE: str = "default"
    HTML_TEMPLATE: str = ""
    PDF_TEMPLATE: str = "default"
    TOC: bool = True
    TOC_DEPTH: int = 3
    NUMBER_SECTIONS: bool = False
    PAPER_SIZE: str = "letter"
    FONT_SIZE: str = "11pt"
    DOCX_REFERENCE_DOC: str = ""
    EPUB_COVER_IMAGE: str = ""
    FILTERS: str = ""
    ASSET_DIRS: str = "images"
    KEEP_TEMP_FILES: bool = False


CONFIG_KEYS = tuple(f.name for f in fields(ConfigSchema))


@dataclass(frozen=True)
class BuildConfig:
    """
    Validated configuration for one build.

    All paths are absolute. Optional paths are None when the key is unset.
    """

    project_dir: Path
    format: str
    master_file: Path
    output_file_name_base: str
    output_dir: Path
    project_name: str
    author: str = ""
    stylesheet: Optional[Path] = None
    html_template: Optional[Path] = None
    latex_template: Optional[Path] = None
    toc: bool = True
    toc_depth: int = 3
    number_sections: bool = False
    paper_size: str = "letter"
    font_size: str = "11pt"
    docx_reference_doc: Optional[Path] = None
    epub_cover_image: Optional[Path] = None
    filters: Tuple[str, ...] = ()
    asset_dirs: Tuple[Path, ...] = ()
    keep_temp_files: bool = False
    settings: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def state_dir(self) -> Path:
        return self.project_dir / STATE_DIR_NAME

    @property
    def work_dir(self) -> Path:
        """Directory for intermediate files (.tex, page JSON, etc.)."""
        return self.state_dir / "build"

    @property
    def logs_dir(self) -> Path:
        logs_path = os.getenv("TECHDOCS_LOGS_PATH")
        if logs_path:
            return Path(logs_path)
        return self.state_dir / "logs"

    @property
    def images_dir(self) -> Path:
        """Directory the diagram filters write into."""
        return self.project_dir / IMAGES_DIR_NAME

    def as_dict(self) -> Dict[str, Any]:
        """Settings keyed as in techdocs.conf, for template rendering."""
        return dict(self.settings)


def parse_config_file(config_path: Path) -> Dict[str, str]:
    """
    Read KEY=value pairs from a techdocs.conf file.

    Comments, quoting, `export` prefixes and ${VAR} interpolation follow the
    same rules as .env files. Keys given without a value are dropped.

    Args:
        config_path: Path to the configuration file

    Returns:
        Dict of raw string values
    """
    values = dotenv_values(config_path)
    return {key: value for key, value in values.items() if value is not None and value != ""}


def _known_settings(values: Dict[str, Any], source: str) -> Dict[str, Any]:
    """Drop unknown keys (with a warning) and None values."""
    known = {}
    for key, value in values.items():
        if value is None:
            continue
        if key not in CONFIG_KEYS:
            _log_warning(f"Ignoring unknown setting '{key}' in {source}")
            continue
        known[key] = value
    return known


def _literal_values(values: Dict[str, Any]) -> Dict[str, Any]:
    """Escape "${" so OmegaConf keeps it as text instead of interpolating."""
    return {
        key: value.replace("${", "\\${") if isinstance(value, str) else value
        for key, value in values.items()
    }


def _resolve_path(project_dir: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = project_dir / path
    return path.resolve()


def _existing_path(project_dir: Path, key: str, value: str) -> Optional[Path]:
    """Resolve an optional path setting, failing if it is set but missing."""
    if not value:
        return None
    path = _resolve_path(project_dir, value)
    if not path.exists():
        raise ConfigurationError(f"{key} points to a file that does not exist: {path}")
    return path


def resolve_stylesheet(project_dir: Path, html_style: str) -> Path:
    """
    Resolve HTML_STYLE to a stylesheet file.

    A value ending in .css is a path relative to the project; anything else
    names a stylesheet bundled with techdocs.
    """
    if html_style.endswith(".css"):
        return _existing_path(project_dir, "HTML_STYLE", html_style)

    bundled = RESOURCES_PATH / "styles" / f"{html_style}.css"
    if not bundled.exists():
        available = sorted(p.stem for p in (RESOURCES_PATH / "styles").glob("*.css"))
        raise ConfigurationError(
            f"Unknown HTML_STYLE '{html_style}'. Available styles: {available}"
        )
    return bundled


def resolve_latex_template(project_dir: Path, pdf_template: str) -> Optional[Path]:
    """Resolve PDF_TEMPLATE. 'default' keeps Pandoc's built-in LaTeX template."""
    if pdf_template == "default":
        return None
    return _existing_path(project_dir, "PDF_TEMPLATE", pdf_template)


def load_config(project_dir: Path, overrides: Optional[Dict[str, Any]] = None) -> BuildConfig:
    """
    Load and validate a project's configuration.

    Layers, from lowest to highest priority: ConfigSchema defaults,
    techdocs.conf, overrides.

    Args:
        project_dir: Directory holding techdocs.conf
        overrides: Settings keyed as in techdocs.conf (e.g., {"FORMAT": "pdf"})

    Returns:
        Frozen BuildConfig

    Raises:
        MissingInputError: If techdocs.conf does not exist
        ConfigurationError: If a value is invalid
    """
    project_dir = Path(project_dir).resolve()
    config_path = project_dir / CONFIG_FILE_NAME

    if not config_path.exists():
        raise MissingInputError(
            config_path,
            "Configuration file",
            hint="Run 'techdocs init' to create a starter project.",
        )

    file_values = _known_settings(parse_config_file(config_path), CONFIG_FILE_NAME)
    override_values = _known_settings(overrides or {}, "command-line options")

    try:
        merged = OmegaConf.merge(
            OmegaConf.structured(ConfigSchema),
            OmegaConf.create(_literal_values(file_values)),
            OmegaConf.create(_literal_values(override_values)),
        )
        settings: ConfigSchema = OmegaConf.to_object(merged)
    except OmegaConfBaseException as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e

    return _build_config(project_dir, settings)


def _protected_sources(
    output_dir: Path, master_file: Path, asset_dirs: Tuple[Path, ...]
) -> List[Path]:
    """Project sources inside output_dir, which clean would delete with it."""
    protected = [
        path
        for path in (master_file, *asset_dirs)
        if path == output_dir or output_dir in path.parents
    ]
    if output_dir.is_dir():
        protected.extend(sorted(output_dir.rglob("*.jinja")))
    return protected


def _build_config(project_dir: Path, settings: ConfigSchema) -> BuildConfig:
    """Validate typed settings and resolve their paths."""
    output_format = settings.FORMAT.strip().lower()
    if output_format not in SUPPORTED_FORMATS:
        raise ConfigurationError(
            f"Unsupported FORMAT '{settings.FORMAT}'. Supported formats: {list(SUPPORTED_FORMATS)}"
        )

    if not 1 <= settings.TOC_DEPTH <= 6:
        raise ConfigurationError(f"TOC_DEPTH must be between 1 and 6, got {settings.TOC_DEPTH}")

    base_name = settings.OUTPUT_FILE_NAME_BASE.strip()
    if not base_name or "/" in base_name or "\\" in base_name:
        raise ConfigurationError(
            f"OUTPUT_FILE_NAME_BASE must be a plain file name, got '{settings.OUTPUT_FILE_NAME_BASE}'"
        )

    # clean removes the output directory, so it must never hold project sources
    output_dir = _resolve_path(project_dir, settings.OUTPUT_DIR)
    if output_dir == project_dir or output_dir in project_dir.parents:
        raise ConfigurationError(
            f"OUTPUT_DIR must be a subdirectory or sibling of the project, got '{settings.OUTPUT_DIR}'"
        )

    master_file = _resolve_path(project_dir, settings.MASTER_FILE)
    asset_dirs = tuple(_resolve_path(project_dir, d) for d in settings.ASSET_DIRS.split())
    protected = _protected_sources(output_dir, master_file, asset_dirs)
    if protected:
        raise ConfigurationError(
            f"OUTPUT_DIR '{settings.OUTPUT_DIR}' contains project sources that clean would "
            f"delete: {', '.join(str(p) for p in protected)}"
        )

    # Only validate the paths the selected format actually uses
    stylesheet = None
    html_template = None
    if output_format in HTML_FORMATS:
        stylesheet = resolve_stylesheet(project_dir, settings.HTML_STYLE)
        html_template = _existing_path(project_dir, "HTML_TEMPLATE", settings.HTML_TEMPLATE)

    latex_template = None
    if output_format == "pdf":
        latex_template = resolve_latex_template(project_dir, settings.PDF_TEMPLATE)

    docx_reference_doc = None
    if output_format == "docx":
        docx_reference_doc = _existing_path(
            project_dir, "DOCX_REFERENCE_DOC", settings.DOCX_REFERENCE_DOC
        )

    epub_cover_image = None
    if output_format == "epub":
        epub_cover_image = _existing_path(project_dir, "EPUB_COVER_IMAGE", settings.EPUB_COVER_IMAGE)

    settings_dict = asdict(settings)
    settings_dict["FORMAT"] = output_format

    return BuildConfig(
        project_dir=project_dir,
        format=output_format,
        master_file=master_file,
        output_file_name_base=base_name,
        output_dir=output_dir,
        project_name=settings.PROJECT_NAME,
        author=settings.AUTHOR,
        stylesheet=stylesheet,
        html_template=html_template,
        latex_template=latex_template,
        toc=settings.TOC,
        toc_depth=settings.TOC_DEPTH,
        number_sections=settings.NUMBER_SECTIONS,
        paper_size=settings.PAPER_SIZE,
        font_size=settings.FONT_SIZE,
        docx_reference_doc=docx_reference_doc,
        epub_cover_image=epub_cover_image,
        filters=tuple(settings.FILTERS.split()),
        asset_dirs=asset_dirs,
        keep_temp_files=settings.KEEP_TEMP_FILES,
        settings=settings_dict,
    )
