"""Configuration loading from pyproject.toml."""

import re
import tomllib
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError

from ._equality import EqualityPredicate, resolve_equality

# A dataflow object referenced as "module.path:variable"
GRAPH_REFERENCE_PATTERN = r"^[\w.]+:\w+$"


class ConfigError(Exception):
    """Error in dagflow configuration."""


class DataflowSettings(BaseModel):
    """Settings read from the ``[tool.dagflow]`` table of pyproject.toml.

    Attributes:
        equality: Name of the equality predicate deciding whether a node
            value changed ("same_value" or "equal").
        max_concurrency: Maximum number of node functions running at once
            within a wavefront. None means no limit.
        graph: Dataflow to load for the CLI, as 'module.path:variable'.
        project_root: Directory containing the pyproject.toml, if any.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    equality: Literal["same_value", "equal"] = "same_value"
    max_concurrency: PositiveInt | None = None
    graph: Annotated[str, Field(pattern=GRAPH_REFERENCE_PATTERN)] | None = None
    project_root: Path | None = None

    @property
    def is_equal(self) -> EqualityPredicate:
        """The equality predicate selected by ``equality``."""
        return resolve_equality(self.equality)


def split_graph_reference(reference: str) -> tuple[str, str]:
    """Split a "module.path:variable" reference into its module and variable names.

    Raises:
        ValueError: If the reference is not of that form.

    """
    if re.fullmatch(GRAPH_REFERENCE_PATTERN, reference) is None:
        msg = f"Expected a dataflow reference of the form 'module.path:variable', got {reference!r}"
        raise ValueError(msg)
    module_name, _, variable = reference.partition(":")
    return module_name, variable


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def load_config(pyproject_path: Path) -> DataflowSettings:
    """Load and validate [tool.dagflow] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed DataflowSettings

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("dagflow", {})
    if not isinstance(section, dict):
        msg = "Invalid [tool.dagflow] configuration: expected a table"
        raise ConfigError(msg)

    try:
        return DataflowSettings.model_validate({**section, "project_root": project_root})
    except ValidationError as e:
        msg = f"Invalid [tool.dagflow] configuration in {pyproject_path}:\n{e}"
        raise ConfigError(msg) from e


def get_config() -> DataflowSettings:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        DataflowSettings (defaults if no pyproject.toml or no [tool.dagflow] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return DataflowSettings()
    return load_config(pyproject_path)
