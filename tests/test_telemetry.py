"""Tests for telemetry configuration helpers."""

from opentelemetry.sdk.trace.sampling import ParentBasedTraceIdRatio, TraceIdRatioBased

from shortlinks.core.telemetry import create_sampler, parse_resource_attributes, setup_telemetry


def test_telemetry_disabled_in_tests():
    assert setup_telemetry() == (None, None)


def test_parse_resource_attributes():
    parsed = parse_resource_attributes("service.namespace=links, team=web,broken,empty=")

    assert parsed == {"service.namespace": "links", "team": "web", "empty": ""}
    assert parse_resource_attributes("") == {}


def test_create_sampler():
    assert isinstance(create_sampler("parentbased_traceidratio", 0.5), ParentBasedTraceIdRatio)
    assert isinstance(create_sampler("traceidratio", 1.0), TraceIdRatioBased)
