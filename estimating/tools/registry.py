# estimating/tools/registry.py
from typing import Dict, List, Optional

from estimating.schemas.tool_spec import ToolSpec


class ToolRegistry:
    _instance_created = False  # one global registry per process

    def __init__(self):
        if ToolRegistry._instance_created:
            raise RuntimeError("Use global tool_registry, do not instantiate ToolRegistry")
        ToolRegistry._instance_created = True

        self._tools: Dict[str, ToolSpec] = {}

    def register(self, spec: ToolSpec) -> None:
        '''
        Register a new tool specification.
        Raises ValueError if a tool with the same name is already registered.

        param:
        spec: ToolSpec - The tool specification to register.
        '''
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def get(self, name: str) -> Optional[ToolSpec]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return sorted(self._tools)


# global instance, created on import
tool_registry = ToolRegistry()
