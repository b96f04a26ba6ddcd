"""
Named lookup of category geometries.

Geometries register themselves under a name so that a configuration file can
pick one (``geometry: fuzzy``) without the learner importing concrete classes.
"""

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class Registry:
    """Maps names to classes; ``register`` doubles as a class decorator."""

    def __init__(self, name: str):
        self._name = name
        self._registry: Dict[str, Any] = {}

    def register(self, name: str) -> Callable:
        def decorator(cls: Any) -> Any:
            if name in self._registry:
                logger.warning(f"Replacing {self._name} entry '{name}'")
            self._registry[name] = cls
            return cls

        return decorator

    def get(self, name: str) -> Any:
        try:
            return self._registry[name]
        except KeyError:
            raise KeyError(
                f"Unknown {self._name} entry '{name}'; choose one of {self.list_available()}"
            ) from None

    def create(self, name: str, *args, **kwargs) -> Any:
        """Instantiate the class registered as ``name``."""
        return self.get(name)(*args, **kwargs)

    def list_available(self) -> List[str]:
        return sorted(self._registry)


GEOMETRY_REGISTRY = Registry("geometry")


def register_geometry(name: str):
    """Decorator for registering category geometries."""
    return GEOMETRY_REGISTRY.register(name)


def create_geometry(name: str, *args, **kwargs):
    return GEOMETRY_REGISTRY.create(name, *args, **kwargs)


def list_available_geometries() -> List[str]:
    return GEOMETRY_REGISTRY.list_available()
