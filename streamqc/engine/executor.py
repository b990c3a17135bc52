"""Module execution engine.

Every module is a pure function of the same read aggregate, so modules run
side by side in a thread pool and are collected back in report order:
- one task per module
- failures confined to the module that raised
- results always returned in the fixed report order
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from streamqc.config import AnalysisConfig
from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.grading import Grade
from streamqc.engine.modules import ModuleRegistry, ModuleResult, QCModule, registry
from streamqc.errors import OrderingViolation

logger = logging.getLogger(__name__)


class ModuleExecutor:
    """Runs the enabled analysis modules over one aggregate."""

    def __init__(
        self,
        config: AnalysisConfig,
        module_registry: ModuleRegistry | None = None,
    ):
        """Initialize the executor.

        Args:
            config: Analysis configuration shared by all modules
            module_registry: Registry to build modules from (defaults to the
                built-in one)
        """
        self.config = config
        self.registry = module_registry or registry

    def build_modules(self) -> list[QCModule]:
        return self.registry.build(self.config)

    def run_module(self, module: QCModule, aggregate: ReadAggregate) -> ModuleResult:
        """Run one module, turning its failure into a failed result.

        Args:
            module: A freshly built module
            aggregate: The shared read aggregate

        Returns:
            ModuleResult with grade, text and chart, or the error message
        """
        started_at = datetime.now()
        try:
            module.run(aggregate)
            result = module.to_result()
        except OrderingViolation:
            raise
        except Exception as e:
            logger.exception("Module %s failed: %s", module.name, e)
            result = ModuleResult(
                module_name=module.name,
                key=module.key,
                success=False,
                grade=Grade.FAIL,
                summary=f"{Grade.FAIL.value.upper()}\t{module.name}\t{aggregate.filename}",
                errors=[f"{type(e).__name__}: {e}"],
            )

        completed_at = datetime.now()
        result.started_at = started_at
        result.completed_at = completed_at
        result.duration_seconds = (completed_at - started_at).total_seconds()
        return result

    async def execute_async(self, aggregate: ReadAggregate) -> list[ModuleResult]:
        """Run all enabled modules concurrently.

        Args:
            aggregate: The read aggregate every module summarizes

        Returns:
            One result per enabled module, in report order
        """
        modules = self.build_modules()
        logger.info(
            "Running %d modules on %s with %d thread(s)",
            len(modules),
            aggregate.filename,
            self.config.threads,
        )

        loop = asyncio.get_running_loop()
        with ThreadPoolExecutor(max_workers=self.config.threads) as pool:
            tasks = [
                loop.run_in_executor(pool, self.run_module, module, aggregate)
                for module in modules
            ]
            results = await asyncio.gather(*tasks)

        failed = [r.module_name for r in results if not r.success]
        if failed:
            logger.warning("%d module(s) failed: %s", len(failed), ", ".join(failed))
        return list(results)

    def execute(self, aggregate: ReadAggregate) -> list[ModuleResult]:
        """Blocking wrapper around ``execute_async``."""
        return asyncio.run(self.execute_async(aggregate))
