# src/Tierbot/command_loader.py
import importlib
import pkgutil

import Tierbot.commands as commands_pkg


def load_all_commands() -> list[str]:
    """Import every module under Tierbot.commands so their @slash_command decorators run.

    Returns the imported module names; importing twice is a no-op.
    """
    prefix = commands_pkg.__name__ + "."
    names = sorted(m.name for m in pkgutil.iter_modules(commands_pkg.__path__, prefix))
    for name in names:
        importlib.import_module(name)
    return names
