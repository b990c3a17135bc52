"""Analysis module framework.

Each analysis family is a subclass of `QCModule` registered with the
singleton registry below. Modules are pure functions of one read aggregate
plus the analysis configuration and can run in any order.

Usage:
    from streamqc.engine.modules import registry

    for module in registry.build(config):
        module.run(aggregate)
        print(module.short_summary())
"""

from streamqc.engine.modules.base import (
    ChartPayload,
    ChartSeries,
    ModuleResult,
    ModuleState,
    QCModule,
)
from streamqc.engine.modules.registry import REPORT_ORDER, ModuleRegistry

# Singleton registry
registry = ModuleRegistry()

# Auto-register built-in modules
from streamqc.engine.modules import basic_statistics  # noqa: E402, F401
from streamqc.engine.modules import per_base_quality  # noqa: E402, F401
from streamqc.engine.modules import per_tile_quality  # noqa: E402, F401
from streamqc.engine.modules import per_sequence_quality  # noqa: E402, F401
from streamqc.engine.modules import per_base_content  # noqa: E402, F401
from streamqc.engine.modules import gc_content  # noqa: E402, F401
from streamqc.engine.modules import n_content  # noqa: E402, F401
from streamqc.engine.modules import sequence_length  # noqa: E402, F401
from streamqc.engine.modules import duplication  # noqa: E402, F401
from streamqc.engine.modules import overrepresented  # noqa: E402, F401
from streamqc.engine.modules import adapter_content  # noqa: E402, F401
from streamqc.engine.modules import kmer_content  # noqa: E402, F401

__all__ = [
    "ChartPayload",
    "ChartSeries",
    "ModuleRegistry",
    "ModuleResult",
    "ModuleState",
    "QCModule",
    "REPORT_ORDER",
    "registry",
]
