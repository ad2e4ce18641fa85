"""
Command loading from the commands/ directory convention.

Layout::

    commands/
        slash/<category>/<command>.py    -> data + execute(interaction)
        prefix/<category>/<command>.py   -> name + execute(message, args)

Either kind may define setup(client), called once when the file is loaded.
"""

import importlib.util
import logging
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Iterator, List, Optional

from .definitions import definition_name

logger = logging.getLogger(__name__)

SLASH = "slash"
PREFIX = "prefix"


@dataclass
class CommandUnit:
    name: str
    execute: Callable[..., Any]
    definition: Any = None
    path: Optional[Path] = None
    module: Optional[ModuleType] = None


def _import_file(path: Path, module_name: str) -> ModuleType:
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load module spec for {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _command_files(directory: Path) -> List[Path]:
    return sorted(
        path for path in directory.glob("*.py")
        if path.is_file() and not path.name.startswith("_")
    )


class CommandRegistry:
    """Name-keyed table of one kind of command."""

    def __init__(self, kind: str):
        if kind not in (SLASH, PREFIX):
            raise ValueError(f"Unknown command kind: {kind}")
        self.kind = kind
        self._commands: Dict[str, CommandUnit] = {}

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: str) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[CommandUnit]:
        return iter(self._commands.values())

    def get(self, name: str) -> Optional[CommandUnit]:
        return self._commands.get(name)

    def names(self) -> List[str]:
        return sorted(self._commands)

    def definitions(self) -> List[Any]:
        return [unit.definition for unit in self._commands.values() if unit.definition is not None]

    def register(self, unit: CommandUnit) -> None:
        existing = self._commands.get(unit.name)
        if existing is not None:
            logger.warning(f"Duplicate {self.kind} command '{unit.name}': "
                           f"{unit.path} replaces {existing.path}")
        self._commands[unit.name] = unit

    def clear(self) -> None:
        self._commands.clear()

    def load(self, root: Path, client: Any = None) -> int:
        """
        Load every command file under root's category folders.

        Files that fail to import or lack a required attribute are logged
        and skipped. Returns the number of commands registered.
        """
        self.clear()
        root = Path(root)
        if not root.is_dir():
            logger.warning(f"{self.kind.capitalize()} command directory {root} not found")
            return 0

        for folder in sorted(p for p in root.iterdir() if p.is_dir() and not p.name.startswith("_")):
            for path in _command_files(folder):
                unit = self._load_file(path, folder.name, client)
                if unit is not None:
                    self.register(unit)

        logger.info(f"Loaded {len(self)} {self.kind} commands from {root}")
        return len(self)

    def _load_file(self, path: Path, category: str, client: Any) -> Optional[CommandUnit]:
        try:
            module = _import_file(path, f"commands.{self.kind}.{category}.{path.stem}")
        except Exception:
            logger.exception(f"Failed to load {self.kind} command at {path}")
            return None

        unit = self._unit_from_module(module, path)
        if unit is None:
            return None

        setup = getattr(module, "setup", None)
        if callable(setup):
            try:
                setup(client)
            except Exception:
                logger.exception(f"Setup hook of {self.kind} command '{unit.name}' failed")
        return unit

    def _unit_from_module(self, module: ModuleType, path: Path) -> Optional[CommandUnit]:
        execute = getattr(module, "execute", None)

        if self.kind == SLASH:
            definition = getattr(module, "data", None)
            name = definition_name(definition) if definition is not None else None
            if name is None or not callable(execute):
                logger.warning(f'The command at {path} is missing a required "data" or "execute" property.')
                return None
            return CommandUnit(name=name, execute=execute, definition=definition, path=path, module=module)

        name = getattr(module, "name", None)
        if not isinstance(name, str) or not name or not callable(execute):
            logger.warning(f'The prefix command at {path} is missing a required "name" or "execute" property.')
            return None
        return CommandUnit(name=name.lower(), execute=execute, path=path, module=module)


def load_auto_modules(directory: Path, client: Any) -> int:
    """
    Import every file in the auto/ directory and call its init(client).

    Returns the number of modules initialized.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return 0

    initialized = 0
    for path in _command_files(directory):
        try:
            module = _import_file(path, f"auto.{path.stem}")
            init = getattr(module, "init", None)
            if callable(init):
                init(client)
                initialized += 1
        except Exception:
            logger.exception(f"Failed to load auto file {path.name}")

    logger.info(f"Initialized {initialized} auto modules from {directory}")
    return initialized
