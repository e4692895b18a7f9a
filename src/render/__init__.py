"""Render module for budget waterfall output display."""

from render.renderers import (
    BaseRenderer,
    WaterfallRenderer,
    BreakdownRenderer,
    ScenarioRenderer,
    HistoryRenderer,
    ProjectionRenderer,
    RENDERER_REGISTRY,
)

__all__ = [
    'BaseRenderer',
    'WaterfallRenderer',
    'BreakdownRenderer',
    'ScenarioRenderer',
    'HistoryRenderer',
    'ProjectionRenderer',
    'RENDERER_REGISTRY',
]
