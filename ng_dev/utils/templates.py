"""Contains utilities for rendering Jinja2 templates."""

from pathlib import Path
from typing import Any

import jinja2
import structlog

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def construct_jinja2_environment(template_dir: Path | None = None) -> jinja2.Environment:
    """Construct a Jinja2 environment, optionally loading templates from a directory."""
    loader = jinja2.FileSystemLoader(str(template_dir)) if template_dir is not None else None
    return jinja2.Environment(
        loader=loader,
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_template_file(template_path: Path, **context: Any) -> str:
    """Render the Jinja2 template at template_path with the given context."""
    environment = construct_jinja2_environment(template_path.parent)
    try:
        template = environment.get_template(template_path.name)
    except jinja2.TemplateNotFound:
        logger.error("Jinja2 template not found", template_path=str(template_path))
        raise
    return template.render(**context)
