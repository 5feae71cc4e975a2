"""Version lookup for rilay."""

import tomllib
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path

DISTRIBUTION = "rilay-conditions"


def get_version() -> str:
    """Version from the source checkout's pyproject.toml, else installed metadata."""
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    if pyproject.is_file():
        project = tomllib.loads(pyproject.read_text(encoding="utf-8")).get("project", {})
        if project.get("name") == DISTRIBUTION and project.get("version"):
            return str(project["version"])
    try:
        return _metadata_version(DISTRIBUTION)
    except PackageNotFoundError:
        return "0.0.0"
