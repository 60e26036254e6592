"""Locate the Dataflow object a CLI command operates on."""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from dagflow._config import split_graph_reference
from dagflow._engine import Dataflow

if TYPE_CHECKING:
    from types import ModuleType

logger = logging.getLogger(__name__)


def _script_module_name(script_path: Path) -> tuple[str, Path]:
    """Get the dotted module name of a script and the directory to import it from.

    Enclosing directories that are packages (have an ``__init__.py``) become
    part of the name, so relative imports inside the script keep working.
    """
    script_path = script_path.resolve()
    parts = [] if script_path.stem == "__init__" else [script_path.stem]
    import_root = script_path.parent
    while (import_root / "__init__.py").is_file():
        parts.insert(0, import_root.name)
        import_root = import_root.parent
    return ".".join(parts), import_root


def _pick_flow(module: ModuleType, variable: str | None) -> Dataflow:
    """Get the named Dataflow of a module, or its first one when no name is given."""
    if variable is not None:
        obj = getattr(module, variable, None)
        if obj is None:
            msg = f"Module {module.__name__!r} has no dataflow named {variable!r}"
            raise ValueError(msg)
        if not isinstance(obj, Dataflow):
            msg = f"{module.__name__}:{variable} is a {type(obj).__name__}, not a Dataflow"
            raise TypeError(msg)
        return obj

    # Module globals keep definition order
    flows = {name: obj for name, obj in vars(module).items() if isinstance(obj, Dataflow)}
    if not flows:
        msg = f"No Dataflow found in module {module.__name__!r}, try using --flow"
        raise ValueError(msg)
    name, flow = next(iter(flows.items()))
    if len(flows) > 1:
        logger.info(f"Found {len(flows)} dataflows, using {name!r}")
    return flow


def load_flow_from_script(script_path: Path, flow_name: str | None = None) -> Dataflow:
    """Import a Python script and return the dataflow it defines.

    Args:
        script_path: Path to the script (or a package's ``__init__.py``).
        flow_name: Variable holding the dataflow. Defaults to the first
            Dataflow defined in the script.

    Raises:
        ImportError: If the script cannot be imported.
        ValueError: If the script defines no such dataflow.
        TypeError: If ``flow_name`` is not a Dataflow.

    """
    module_name, import_root = _script_module_name(script_path)
    if str(import_root) not in sys.path:
        sys.path.insert(0, str(import_root))

    logger.debug(f"Importing {module_name} from {import_root}")
    return _pick_flow(importlib.import_module(module_name), flow_name)


def load_flow(path: str, flow_name: str | None = None) -> Dataflow:
    """Load a dataflow from a script path or a 'module.path:variable' reference.

    Raises:
        ImportError: If the script or module cannot be imported.
        ValueError: If ``path`` is neither an existing file nor a valid
            reference, or names no dataflow.
        TypeError: If the referenced object is not a Dataflow.

    """
    if Path(path).is_file():
        return load_flow_from_script(Path(path), flow_name)

    module_name, variable = split_graph_reference(path)
    return _pick_flow(importlib.import_module(module_name), variable)
