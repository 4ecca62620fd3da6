import pytest
from evateam_mcp.core.metrics import PrometheusMetrics, RequestMetrics
from prometheus_client import CollectorRegistry


def test_prometheus_metrics_satisfies_protocol():
    assert isinstance(PrometheusMetrics(), RequestMetrics)


def test_records_labeled_observation():
    registry = CollectorRegistry()
    metrics = PrometheusMetrics(namespace="test_eva")
    metrics.register(registry)

    metrics.record_request_duration(200, "CmfTask.list", "mock-eva.com", "tasks.list", 0.2)

    labels = {
        "status": "200",
        "method": "CmfTask.list",
        "host": "mock-eva.com",
        "function": "tasks.list",
    }
    count = registry.get_sample_value("test_eva_request_duration_seconds_count", labels)
    total = registry.get_sample_value("test_eva_request_duration_seconds_sum", labels)
    assert count == 1.0
    assert total == pytest.approx(0.2)


def test_register_twice_is_not_an_error():
    registry = CollectorRegistry()
    metrics = PrometheusMetrics(namespace="test_twice")
    metrics.register(registry)
    metrics.register(registry)

    assert metrics.unregister(registry) is True
    assert metrics.unregister(registry) is False
