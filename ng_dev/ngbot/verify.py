"""Verifies the syntax of the NgBot configuration file."""

from pathlib import Path

import structlog
from ruamel.yaml.error import YAMLError

from ng_dev.utils.console import error, green, info, red
from ng_dev.utils.constants import NGBOT_CONFIG_PATH
from ng_dev.utils.yaml import load_yaml_string

logger = structlog.get_logger(__name__)


def verify_ngbot_config(base_dir: Path) -> int:
    """Parses the NgBot configuration of the repository and returns the exit code of the check."""
    config_path = base_dir / NGBOT_CONFIG_PATH
    if not config_path.is_file():
        error(f"{red('!')} No NgBot config found at {config_path}")
        return 1
    try:
        load_yaml_string(config_path.read_text(encoding="utf-8"))
    except YAMLError as exc:
        error(f"{red('!')} Invalid NgBot YAML config")
        error(str(exc))
        return 1
    logger.debug("Parsed NgBot config", path=str(config_path))
    info(f"{green('√')}  Valid NgBot YAML config")
    return 0
