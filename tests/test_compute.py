from datetime import datetime, timezone

import pytest

from ofcatalog.compute import (
    ComponentNotFoundError,
    ComputeError,
    ComputeHandler,
    MetricSourceNotFoundError,
)
from ofcatalog.converter import ComponentConverter
from ofcatalog.dtos import ComponentDTO, Metadata, MetricSourceDTO, Spec


class FakeProcessor:
    def __init__(self, values=None, failing=()):
        self.values = values or {}
        self.failing = set(failing)
        self.calls = []

    def process(self, facts):
        self.calls.append(facts)
        key = facts[0] if facts else None
        if key in self.failing:
            raise RuntimeError(f"cannot process {key}")
        return self.values.get(key, 1.0)


class FakeRepository:
    def __init__(self, fail=False):
        self.fail = fail
        self.pushed = []

    def push(self, metric_source, value, recorded_at):
        if self.fail:
            raise RuntimeError("push rejected")
        self.pushed.append((metric_source, value, recorded_at))


def make_component():
    return ComponentDTO(
        metadata=Metadata(name="svc", component_type="service"),
        spec=Spec(
            name="svc",
            metric_sources={
                "coverage": MetricSourceDTO(
                    id="ms-1", name="coverage-svc", metric="m-1", facts=["cov"]
                ),
                "lint": MetricSourceDTO(
                    id="ms-2", name="lint-svc", metric="m-2", facts=["lint"]
                ),
            },
        ),
    )


def make_handler(processor, repository):
    return ComputeHandler(repository, processor, ComponentConverter(lambda n, t: n))


def test_compute_single_metric_pushes_value():
    processor = FakeProcessor(values={"cov": 0.75})
    repository = FakeRepository()
    handler = make_handler(processor, repository)
    before = datetime.now(timezone.utc)

    result = handler.compute({"svc": make_component()}, "svc", False, "coverage")

    after = datetime.now(timezone.utc)
    assert result == {"coverage": 0.75}
    assert len(repository.pushed) == 1
    source, value, recorded_at = repository.pushed[0]
    assert source.id == "ms-1"
    assert source.name == "coverage-svc"
    assert source.metric == "m-1"
    assert source.facts == ["cov"]
    assert value == 0.75
    assert before <= recorded_at <= after


def test_compute_unknown_component_raises():
    handler = make_handler(FakeProcessor(), FakeRepository())
    with pytest.raises(ComponentNotFoundError, match="missing"):
        handler.compute({"svc": make_component()}, "missing", True, "")


def test_compute_single_unknown_metric_raises():
    handler = make_handler(FakeProcessor(), FakeRepository())
    with pytest.raises(MetricSourceNotFoundError, match="absent"):
        handler.compute({"svc": make_component()}, "svc", False, "absent")


def test_compute_single_metric_processor_failure_raises():
    repository = FakeRepository()
    handler = make_handler(FakeProcessor(failing={"cov"}), repository)
    with pytest.raises(ComputeError, match="cannot process cov"):
        handler.compute({"svc": make_component()}, "svc", False, "coverage")
    assert repository.pushed == []


def test_push_failure_raises_compute_error():
    handler = make_handler(FakeProcessor(), FakeRepository(fail=True))
    with pytest.raises(ComputeError, match="push rejected"):
        handler.compute_metric(make_component(), "lint")


def test_compute_all_metrics():
    processor = FakeProcessor(values={"cov": 0.5, "lint": 3.0})
    repository = FakeRepository()
    handler = make_handler(processor, repository)

    result = handler.compute({"svc": make_component()}, "svc", True, "")

    assert result == {"coverage": 0.5, "lint": 3.0}
    assert sorted(source.name for source, _, _ in repository.pushed) == [
        "coverage-svc",
        "lint-svc",
    ]


def test_compute_all_skips_failing_metric():
    processor = FakeProcessor(values={"lint": 2.0}, failing={"cov"})
    repository = FakeRepository()
    handler = make_handler(processor, repository)

    result = handler.compute({"svc": make_component()}, "svc", True, "")

    assert result == {"lint": 2.0}
    assert [source.name for source, _, _ in repository.pushed] == ["lint-svc"]
    assert len(processor.calls) == 2


def test_compute_all_without_metric_sources_does_nothing():
    component = make_component()
    component.spec.metric_sources = None
    repository = FakeRepository()
    handler = make_handler(FakeProcessor(), repository)

    assert handler.compute({"svc": component}, "svc", True, "") == {}
    assert repository.pushed == []


def test_compute_metric_passes_facts_to_processor():
    processor = FakeProcessor()
    handler = make_handler(processor, FakeRepository())
    component = make_component()

    handler.compute_metric(component, "lint")

    assert processor.calls == [["lint"]]


def test_not_found_errors_are_compute_errors():
    handler = make_handler(FakeProcessor(), FakeRepository())
    with pytest.raises(ComputeError):
        handler.compute({}, "svc", False, "coverage")
    with pytest.raises(LookupError):
        handler.compute_metric(make_component(), "nope")