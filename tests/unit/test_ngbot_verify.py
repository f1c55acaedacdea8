"""Unit tests for verifying the NgBot configuration."""

from pathlib import Path

from ng_dev.ngbot.verify import verify_ngbot_config


def write_ngbot_config(base_dir: Path, content: str) -> None:
    (base_dir / ".github").mkdir()
    (base_dir / ".github" / "angular-robot.yml").write_text(content)


def test_valid_config(tmp_path: Path) -> None:
    """Test that a parsable configuration passes."""
    write_ngbot_config(tmp_path, "merge:\n  g3Status:\n    include: ['packages/**']\n")
    assert verify_ngbot_config(tmp_path) == 0


def test_invalid_yaml(tmp_path: Path) -> None:
    """Test that malformed YAML fails the check."""
    write_ngbot_config(tmp_path, "merge: [g3Status: {\n")
    assert verify_ngbot_config(tmp_path) == 1


def test_missing_config(tmp_path: Path) -> None:
    """Test that a missing configuration fails the check."""
    assert verify_ngbot_config(tmp_path) == 1
