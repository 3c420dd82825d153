# estimating/tools/auto_discover.py
"""
Import every module under estimating.tools so each tool registers itself
in the global tool_registry.

    from estimating.tools.registry import tool_registry
    from estimating.tools.auto_discover import discover_tools
    discover_tools()
    tool_registry.get("regenerate_estimate")
"""
import importlib
import pkgutil

import estimating.tools


def discover_tools():
    for _, module_name, _ in pkgutil.walk_packages(
        estimating.tools.__path__,
        estimating.tools.__name__ + "."
    ):
        importlib.import_module(module_name)
