"""Tests for core domain models and settings."""

import dataclasses
from pathlib import Path

import pytest

from loadcompare.core.models import (
    DEFAULT_SCENARIOS,
    DEFAULT_TARGETS,
    AggregatedMetrics,
    CachePolicy,
    DurationStats,
    FailureStats,
    RequestStats,
    ResultFileDescriptor,
    Settings,
    SnapshotProgress,
    TargetMetrics,
    utc_now,
)

pytestmark = [
    pytest.mark.unit,
    pytest.mark.core,
    pytest.mark.tier(1),
    pytest.mark.tra("Core.Models"),
]


class TestTargetMetrics:
    """Tests for TargetMetrics.from_aggregated()."""

    def test_flattens_aggregated_metrics(self) -> None:
        metrics = AggregatedMetrics(
            duration=DurationStats(p50=30.0, p95=50.0, p99=50.0, avg=30.0, count=5),
            requests=RequestStats(count=5.0, rate=5.0),
            failures=FailureStats(count=1.0, rate=0.2),
            window_seconds=1.0,
        )

        result = TargetMetrics.from_aggregated(
            metrics, file="smoke_coordix.json", timestamp="2024-01-01T00-00-00"
        )

        assert result.p50 == 30.0
        assert result.p95 == 50.0
        assert result.med == 30.0
        assert result.total_requests == 5.0
        assert result.rps == 5.0
        assert result.errors == 1.0
        assert result.error_rate == pytest.approx(0.2)
        assert result.file == "smoke_coordix.json"
        assert result.timestamp == "2024-01-01T00-00-00"

    def test_zero_requests_gives_zero_error_rate(self) -> None:
        """Error rate is guarded against division by zero."""
        result = TargetMetrics.from_aggregated(AggregatedMetrics.empty(45.0))

        assert result.error_rate == 0.0
        assert result.total_requests == 0.0

    def test_is_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            TargetMetrics().p50 = 1.0  # type: ignore[misc]


class TestSnapshotProgress:
    """Tests for SnapshotProgress.completed."""

    def test_completed_when_all_processed(self) -> None:
        assert SnapshotProgress(processed=3, total=3).completed is True

    def test_not_completed_while_pending(self) -> None:
        assert SnapshotProgress(processed=2, total=3).completed is False


class TestResultFileDescriptor:
    def test_filename_and_recency_key(self) -> None:
        descriptor = ResultFileDescriptor(
            scenario="smoke",
            target="coordix",
            path=Path("/r/smoke_coordix_2024-01-02T00-00-00.json"),
        )

        assert descriptor.filename == "smoke_coordix_2024-01-02T00-00-00.json"
        assert descriptor.recency_key == descriptor.filename


class TestSettingsFromEnv:
    """Tests for Settings.from_env()."""

    def test_defaults_with_empty_environment(self) -> None:
        settings = Settings.from_env({})

        assert settings.results_dir == Path("results")
        assert settings.targets == DEFAULT_TARGETS
        assert settings.scenarios == DEFAULT_SCENARIOS
        assert settings.cache == CachePolicy(ttl_seconds=300.0, max_entries=50)
        assert settings.port == 3000

    def test_reads_overrides(self) -> None:
        settings = Settings.from_env(
            {
                "LOADCOMPARE_RESULTS_DIR": "/tmp/out",
                "LOADCOMPARE_TARGETS": "alpha, beta ,,gamma",
                "LOADCOMPARE_SCENARIOS": "smoke",
                "LOADCOMPARE_CACHE_TTL": "10",
                "LOADCOMPARE_CACHE_SIZE": "5",
                "LOADCOMPARE_HOST": "0.0.0.0",
                "LOADCOMPARE_PORT": "8080",
            }
        )

        assert settings.results_dir == Path("/tmp/out")
        assert settings.targets == ("alpha", "beta", "gamma")
        assert settings.scenarios == ("smoke",)
        assert settings.cache == CachePolicy(ttl_seconds=10.0, max_entries=5)
        assert settings.host == "0.0.0.0"
        assert settings.port == 8080

    def test_port_falls_back_to_plain_port_variable(self) -> None:
        assert Settings.from_env({"PORT": "4000"}).port == 4000

    @pytest.mark.parametrize("raw", ["abc", "-1", "0", "nan", "inf"])
    def test_invalid_ttl_falls_back_to_default(self, raw: str) -> None:
        settings = Settings.from_env({"LOADCOMPARE_CACHE_TTL": raw})

        assert settings.cache.ttl_seconds == 300.0

    def test_invalid_size_falls_back_to_default(self) -> None:
        settings = Settings.from_env({"LOADCOMPARE_CACHE_SIZE": "many"})

        assert settings.cache.max_entries == 50

    def test_blank_target_list_keeps_defaults(self) -> None:
        assert Settings.from_env({"LOADCOMPARE_TARGETS": " , "}).targets == (
            DEFAULT_TARGETS
        )


def test_utc_now_is_iso_with_z_suffix() -> None:
    stamp = utc_now()

    assert stamp.endswith("Z")
    assert "T" in stamp
