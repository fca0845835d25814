# core/registry.py — Provider registry shared by the inventory modules
#
# Modules advertise implementations of the interfaces in core/interfaces/
# (IMPLEMENTS) and look them up instead of importing each other (REQUIRES).
# The app factory checks at startup that every REQUIRES is satisfied.

import importlib
import logging
from typing import Any

log = logging.getLogger("inventory.registry")

# Interface name -> "module:Class" of the abstract base a provider must subclass
INTERFACES = {
    "ComplianceProvider": "core.interfaces.compliance:ComplianceProvider",
}


def _interface_class(interface_name: str):
    path = INTERFACES.get(interface_name)
    if path is None:
        return None
    module_name, _, class_name = path.partition(":")
    return getattr(importlib.import_module(module_name), class_name)


class ModuleRegistry:
    """Interface name -> provider instance, plus the REQUIRES declared by loaded modules."""

    def __init__(self):
        self._providers: dict[str, Any] = {}
        self._declared_requires: list[tuple[str, str]] = []  # (module_id, interface)

    def register_provider(self, interface_name: str, impl: Any) -> None:
        """Register a provider; known interfaces reject objects that don't implement them."""
        expected = _interface_class(interface_name)
        if expected is not None and not isinstance(impl, expected):
            raise TypeError(
                f"{type(impl).__name__} does not implement {expected.__name__}"
            )
        if interface_name in self._providers and self._providers[interface_name] is not impl:
            log.warning(f"Replacing provider for '{interface_name}' with {type(impl).__name__}")
        self._providers[interface_name] = impl
        log.debug(f"Provider for '{interface_name}': {type(impl).__name__}")

    def get_provider(self, interface_name: str) -> Any:
        """The provider for an interface, or None when no loaded module implements it."""
        return self._providers.get(interface_name)

    def record_requires(self, module_id: str, requires: list[str]) -> None:
        self._declared_requires.extend((module_id, iface) for iface in requires)

    def missing(self) -> list[tuple[str, str]]:
        """(module_id, interface) pairs with no registered provider."""
        return [
            (module_id, iface)
            for module_id, iface in self._declared_requires
            if iface not in self._providers
        ]

    def validate_dependencies(self) -> bool:
        """Log every unsatisfied REQUIRES; the app still starts without them."""
        missing = self.missing()
        for module_id, iface in missing:
            log.error(f"Module '{module_id}' requires '{iface}' but no module provides it")
        if not missing:
            log.info(f"Module dependencies satisfied ({len(self._declared_requires)} checked)")
        return not missing

    @property
    def providers(self) -> dict[str, Any]:
        return dict(self._providers)
