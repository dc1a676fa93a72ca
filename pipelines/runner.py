from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Protocol

from utils.logging_setup import init_logging


logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    profiles: list = field(default_factory=list)
    outcomes: list = field(default_factory=list)
    meta: dict = field(default_factory=dict)


class Step(Protocol):
    def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    """Run steps in order, handing each the context the previous one returned."""

    def __init__(self, steps: List[Step]):
        self.steps = steps

    def run(self, ctx: RunContext) -> RunContext:
        init_logging()
        for step in self.steps:
            name = type(step).__name__
            t0 = time.perf_counter()
            ctx = step.run(ctx)
            logger.info(
                "step finished",
                extra={
                    "step": name,
                    "status": "ok",
                    "duration_ms": int((time.perf_counter() - t0) * 1000),
                    "run_id": ctx.meta.get("run_id") or "-",
                },
            )
        return ctx
