import json
import logging

from homepage.telemetry.logger import (
    CorrelationFilter,
    DevelopmentFormatter,
    JSONFormatter,
    correlation_scope,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="homepage.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Job completed %s",
        args=("successfully",),
        exc_info=None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    line = JSONFormatter(service_name="homepage").format(
        _record(component="scheduler", job_name="uptime")
    )
    entry = json.loads(line)

    assert entry["message"] == "Job completed successfully"
    assert entry["service"] == "homepage"
    assert entry["level"] == "INFO"
    assert entry["component"] == "scheduler"
    assert entry["job_name"] == "uptime"
    assert entry["timestamp"].endswith("+00:00")


def test_development_formatter_appends_fields():
    line = DevelopmentFormatter().format(_record(component="agent"))

    assert "Job completed successfully" in line
    assert line.endswith("[component=agent]")


def test_correlation_filter_uses_active_scope():
    correlation = CorrelationFilter()

    with correlation_scope("req-1") as active:
        first, second = _record(), _record()
        correlation.filter(first)
        correlation.filter(second)

    assert active == "req-1"
    assert first.correlation_id == second.correlation_id == "req-1"


def test_correlation_filter_outside_scope_leaves_record_alone():
    record = _record()

    assert CorrelationFilter().filter(record)
    assert not hasattr(record, "correlation_id")


def test_each_scope_gets_a_fresh_id():
    with correlation_scope() as first:
        pass
    with correlation_scope() as second:
        pass

    assert first.startswith("hp-")
    assert first != second
