"""Task pipeline: steps, builder and bounded parallel fan-out."""

from .builder import Builder, FuncStep, Pipeline, Step
from .parallel import ParallelStep, WorkUnit, run_parallel

__all__ = [
    "Builder",
    "FuncStep",
    "ParallelStep",
    "Pipeline",
    "Step",
    "WorkUnit",
    "run_parallel",
]
