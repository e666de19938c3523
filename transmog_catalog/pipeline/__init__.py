"""Hydration pipeline and its scheduler."""

from transmog_catalog.pipeline.hydration_pipeline import HydrationPipeline
from transmog_catalog.pipeline.scheduler import HydrationScheduler

__all__ = ["HydrationPipeline", "HydrationScheduler"]
