"""Module registry for discovering and instantiating analysis modules."""

from __future__ import annotations

import logging
from typing import Type

from streamqc.config import AnalysisConfig
from streamqc.engine.modules.base import QCModule

logger = logging.getLogger(__name__)

# Fixed order of modules in every combined report.
REPORT_ORDER = (
    "basic_statistics",
    "per_base_quality",
    "per_tile_quality",
    "per_sequence_quality",
    "per_base_content",
    "gc_content",
    "n_content",
    "sequence_length",
    "duplication",
    "overrepresented",
    "adapter_content",
    "kmer_content",
)


class ModuleRegistry:
    """Central registry for analysis modules."""

    def __init__(self) -> None:
        self._modules: dict[str, Type[QCModule]] = {}

    def register(self, module_cls: Type[QCModule]) -> Type[QCModule]:
        """Register a QCModule subclass.

        Can be used as a decorator::

            @registry.register
            class MyModule(QCModule):
                key = "my_module"
                ...
        """
        key = module_cls.key
        if not key:
            raise ValueError(f"Module class {module_cls.__name__} has no key")
        if key not in REPORT_ORDER:
            raise ValueError(f"Module {key!r} has no place in the report order")
        if key in self._modules:
            logger.warning("Overwriting module '%s' in registry", key)
        self._modules[key] = module_cls
        return module_cls

    def get(self, key: str) -> Type[QCModule] | None:
        """Look up a module class by key."""
        return self._modules.get(key)

    def has(self, key: str) -> bool:
        return key in self._modules

    def all(self) -> dict[str, Type[QCModule]]:
        """Return all registered modules in report order."""
        return {key: self._modules[key] for key in self.keys()}

    def keys(self) -> list[str]:
        """Registered module keys in report order."""
        return [key for key in REPORT_ORDER if key in self._modules]

    def build(self, config: AnalysisConfig) -> list[QCModule]:
        """Instantiate every module the configuration enables, in report order."""
        modules = []
        for key, module_cls in self.all().items():
            if module_cls.is_enabled(config):
                modules.append(module_cls(config))
            else:
                logger.info("Skipping %s (ignored in limits)", module_cls.name)
        return modules

    def info(self) -> list[dict[str, str]]:
        """Return metadata for every registered module."""
        out = []
        for key, cls in self.all().items():
            out.append({
                "key": key,
                "name": cls.name,
                "description": cls.description,
                "family": cls.family or "",
                "version": cls.version,
            })
        return out
