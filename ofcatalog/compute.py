"""Computation of metric values for components and pushing them to the catalogue."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol, Sequence

from ofcatalog.converter import (
    ComponentConverter,
    MetricSourceResource,
    metric_source_to_resource,
)
from ofcatalog.dtos import ComponentDTO

logger = logging.getLogger(__name__)


class ComputeError(Exception):
    """A metric could not be computed or pushed."""


class ComponentNotFoundError(ComputeError, LookupError):
    """The requested component is not part of the state."""


class MetricSourceNotFoundError(ComputeError, LookupError):
    """The component has no metric source for the requested metric."""


class FactProcessor(Protocol):
    def process(self, facts: Sequence[Any]) -> float: ...


class MetricRepository(Protocol):
    def push(
        self, metric_source: MetricSourceResource, value: float, recorded_at: datetime
    ) -> None: ...


class ComputeHandler:
    """Evaluates the facts of a component's metric sources and records the results."""

    def __init__(
        self,
        repository: MetricRepository,
        processor: FactProcessor,
        converter: ComponentConverter,
    ) -> None:
        self._repository = repository
        self._processor = processor
        self._converter = converter

    def compute(
        self,
        components: Mapping[str, ComponentDTO],
        component_name: str,
        compute_all: bool,
        metric_name: str,
    ) -> dict[str, float]:
        """Compute one metric, or every metric, of the named component.

        With a single metric any failure is raised. When computing all metrics a
        failing metric is logged and skipped. Returns the values that were pushed.
        """
        component = components.get(component_name)
        if component is None:
            raise ComponentNotFoundError(
                f"component not found for name {component_name}"
            )

        if not compute_all:
            logger.info("Tracking metric '%s' component '%s'", metric_name, component_name)
            return {metric_name: self.compute_metric(component, metric_name)}

        values: dict[str, float] = {}
        for name in list(component.spec.metric_sources or {}):
            logger.info("Tracking metric '%s' for component '%s'", name, component_name)
            try:
                values[name] = self.compute_metric(component, name)
            except ComputeError as exc:
                logger.error("compute metric %s: %s", name, exc)
        return values

    def compute_metric(self, component: ComponentDTO, metric_name: str) -> float:
        """Process the facts of one metric source and push the resulting value."""
        metric_source = (component.spec.metric_sources or {}).get(metric_name)
        if metric_source is None:
            raise MetricSourceNotFoundError(
                f"metric source not found for metric {metric_name}"
            )

        try:
            value = self._processor.process(metric_source.facts)
        except Exception as exc:
            raise ComputeError(str(exc)) from exc

        try:
            self._repository.push(
                metric_source_to_resource(metric_source),
                value,
                datetime.now(timezone.utc),
            )
        except Exception as exc:
            raise ComputeError(f"error: {exc}") from exc

        return value