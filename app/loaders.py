# =============================================================================
# app/loaders.py - Controller and Model Discovery
# =============================================================================
# Imports application code from directories instead of hard-coded imports:
#
#   controllers/             load_controllers("controllers", app)
#     users/__init__.py  ->    users.register(app)  or  app.include_router(users.router)
#     orders/__init__.py
#   models/                  load_models("models")
#     user.py            ->    imported for its side effects
#     test_user.py       ->    skipped
#
# Modules are cached in sys.modules under "<dir name>.<entry>"; loading the
# same file twice returns the cached module.
# =============================================================================

import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType

from fastapi import APIRouter, FastAPI

from app.exceptions import ControllerLoadError
from lib.utils import is_test_module

logger = logging.getLogger(__name__)


def import_module_from_path(name: str, path: Path, package: bool = False) -> ModuleType:
    """
    Import a module from a file path, reusing an earlier import of the same file.

    Args:
        name: Module name to register in sys.modules
        path: The .py file (a package's __init__.py when package=True)
        package: Whether the module is a package (enables relative imports
            of its submodules)

    Returns:
        The imported module
    """
    path = path.resolve()
    cached = sys.modules.get(name)
    if cached is not None and getattr(cached, "__file__", None) == str(path):
        return cached

    search_locations = [str(path.parent)] if package else None
    spec = importlib.util.spec_from_file_location(
        name, path, submodule_search_locations=search_locations
    )
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise
    return module


def load_controllers(path: str | Path, app: FastAPI) -> list[ModuleType]:
    """
    Import each controller package under `path` and attach it to `app`.

    A controller is a sub-directory with an __init__.py that defines either
    register(app) or a module-level APIRouter named `router`. Directories
    without __init__.py are ignored.
    """
    root = Path(path)
    loaded: list[ModuleType] = []

    for entry in sorted(root.iterdir()):
        init_file = entry / "__init__.py"
        if not entry.is_dir() or not init_file.exists():
            continue

        module = import_module_from_path(f"{root.name}.{entry.name}", init_file, package=True)

        register = getattr(module, "register", None)
        router = getattr(module, "router", None)
        if callable(register):
            register(app)
        elif isinstance(router, APIRouter):
            app.include_router(router)
        else:
            raise ControllerLoadError(str(entry))

        logger.info(f"Loaded controller: {entry.name}")
        loaded.append(module)

    return loaded


def load_models(path: str | Path) -> list[ModuleType]:
    """Import every model module under `path`, skipping tests and __init__.py."""
    root = Path(path)
    loaded: list[ModuleType] = []

    for entry in sorted(root.glob("*.py")):
        if entry.name == "__init__.py" or is_test_module(entry):
            continue
        module = import_module_from_path(f"{root.name}.{entry.stem}", entry)
        logger.debug(f"Loaded model module: {entry.stem}")
        loaded.append(module)

    return loaded
