"""Usage and cost accounting for provider calls.

Every provider attempt is reported to the monitor. Records are updated under a
per-provider lock by building a new model instance and swapping it in, so
readers never observe a half-applied update.
"""

import asyncio
import json
import threading
from collections import deque
from datetime import UTC, date, datetime, timedelta

import structlog

from lumosgen.ai.pricing import calculate_cost
from lumosgen.ai.types import (
    CostAlert,
    CostSavings,
    DetailedUsageStats,
    GenerationResponse,
    PerformanceMetrics,
    ProviderKind,
    UsageStats,
)

logger = structlog.get_logger()

SECONDS_PER_DAY = 24 * 60 * 60


def _provider_key(provider: str | ProviderKind) -> str:
    return provider.value if isinstance(provider, ProviderKind) else provider


def _today() -> str:
    return datetime.now(UTC).date().isoformat()


class UsageMonitor:
    """Per-provider usage statistics, cost alerts and performance history."""

    def __init__(
        self,
        daily_threshold: float = 10.0,
        total_threshold: float = 100.0,
        retention_days: int = 30,
        window_size: int = 100,
        history_size: int = 24,
        sweep_interval: float = SECONDS_PER_DAY,
    ):
        """Initialize usage monitor.

        Args:
            daily_threshold: Daily cost (USD) per provider that raises an alert
            total_threshold: Lifetime cost (USD) per provider that raises an alert
            retention_days: Days of daily usage kept by the sweep
            window_size: Number of response time samples kept per provider
            history_size: Number of performance snapshots kept per provider
            sweep_interval: Seconds between background purges
        """
        self.daily_threshold = daily_threshold
        self.total_threshold = total_threshold
        self.retention_days = retention_days
        self.window_size = window_size
        self.history_size = history_size
        self.sweep_interval = sweep_interval

        self._registry_lock = threading.Lock()
        self._alerts_lock = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._stats: dict[str, DetailedUsageStats] = {}
        self._history: dict[str, deque[PerformanceMetrics]] = {}
        self._alerts: list[CostAlert] = []
        self._alert_keys: set[tuple[str, float, str]] = set()
        self._sweep_task: asyncio.Task | None = None

        for kind in ProviderKind:
            self._ensure_provider(kind.value)

    def _ensure_provider(self, provider: str) -> threading.Lock:
        with self._registry_lock:
            if provider not in self._locks:
                self._locks[provider] = threading.Lock()
                self._stats[provider] = DetailedUsageStats(provider=provider)
                self._history[provider] = deque(maxlen=self.history_size)
            return self._locks[provider]

    def record_request(
        self,
        provider: str | ProviderKind,
        response: GenerationResponse | None,
        elapsed_ms: float,
        error: BaseException | None = None,
    ) -> list[CostAlert]:
        """Record one provider attempt.

        Args:
            provider: Provider that handled the attempt
            response: Response on success, None on failure
            elapsed_ms: Wall time of the attempt in milliseconds
            error: Failure, if any

        Returns:
            Cost alerts newly raised by this request
        """
        key = _provider_key(provider)
        lock = self._ensure_provider(key)
        now = datetime.now(UTC)
        day = now.date().isoformat()
        succeeded = response is not None and error is None

        with lock:
            updated = self._stats[key].model_copy(deep=True)
            daily = updated.daily_usage.get(day) or UsageStats(provider=key)

            updated.requests += 1
            daily.requests += 1
            updated.last_used = now
            daily.last_used = now

            if succeeded:
                cost = response.cost or 0.0
                for record in (updated, daily):
                    record.tokens.input += response.usage.input
                    record.tokens.output += response.usage.output
                    record.tokens.total += response.usage.total
                    record.cost += cost
            else:
                updated.errors += 1
                daily.errors += 1

            window = deque(updated.response_times, maxlen=self.window_size)
            window.append(elapsed_ms)
            updated.response_times = list(window)
            updated.daily_usage[day] = daily
            self._apply_derived_metrics(updated)

            self._stats[key] = updated
            self._history[key].append(
                PerformanceMetrics(
                    average_latency=updated.average_response_time,
                    p95_latency=updated.p95_response_time,
                    error_rate=100.0 - updated.success_rate,
                    timestamp=now,
                )
            )

        return self._check_thresholds(key, daily.cost, updated.cost)

    @staticmethod
    def _apply_derived_metrics(stats: DetailedUsageStats) -> None:
        times = stats.response_times
        if times:
            stats.average_response_time = sum(times) / len(times)
            ordered = sorted(times)
            stats.p95_response_time = ordered[min(int(len(ordered) * 0.95), len(ordered) - 1)]
        if stats.requests > 0:
            stats.success_rate = (stats.requests - stats.errors) / stats.requests * 100
            stats.cost_per_request = stats.cost / stats.requests
        if stats.tokens.total > 0:
            stats.cost_per_token = stats.cost / stats.tokens.total

    def _check_thresholds(self, provider: str, daily_cost: float, total_cost: float) -> list[CostAlert]:
        raised = []
        checks = [
            ("daily", self.daily_threshold, daily_cost),
            ("total", self.total_threshold, total_cost),
        ]
        with self._alerts_lock:
            for scope, threshold, current in checks:
                if current <= threshold:
                    continue
                alert_key = (scope, threshold, provider)
                if alert_key in self._alert_keys:
                    continue
                alert = CostAlert(
                    scope=scope, threshold=threshold, provider=provider, current=current
                )
                self._alert_keys.add(alert_key)
                self._alerts.append(alert)
                raised.append(alert)
                logger.warning(
                    "cost_alert_triggered",
                    scope=scope,
                    provider=provider,
                    threshold=threshold,
                    current=round(current, 4),
                )
        return raised

    def get_stats(
        self, provider: str | ProviderKind | None = None
    ) -> DetailedUsageStats | dict[str, DetailedUsageStats]:
        """Deep copies of usage records.

        Args:
            provider: Single provider to return, or None for all

        Returns:
            One record, or a mapping of provider id to record
        """
        if provider is not None:
            key = _provider_key(provider)
            stats = self._stats.get(key)
            if stats is None:
                return DetailedUsageStats(provider=key)
            return stats.model_copy(deep=True)
        return {key: stats.model_copy(deep=True) for key, stats in list(self._stats.items())}

    def get_total_cost(self) -> float:
        return sum(stats.cost for stats in list(self._stats.values()))

    def get_daily_cost(self, day: str | date | None = None) -> float:
        """Cost across all providers for ``day`` (UTC today by default)."""
        if day is None:
            day = _today()
        elif isinstance(day, date):
            day = day.isoformat()
        total = 0.0
        for stats in list(self._stats.values()):
            daily = stats.daily_usage.get(day)
            if daily is not None:
                total += daily.cost
        return total

    def get_cost_alerts(self) -> list[CostAlert]:
        with self._alerts_lock:
            return [alert.model_copy() for alert in self._alerts]

    def get_performance_metrics(self, provider: str | ProviderKind) -> list[PerformanceMetrics]:
        history = self._history.get(_provider_key(provider))
        if history is None:
            return []
        return [snapshot.model_copy() for snapshot in list(history)]

    def get_cost_savings(self, comparison_model: str = "gpt-4") -> CostSavings:
        """Estimate what DeepSeek usage would have cost on an OpenAI model.

        Args:
            comparison_model: OpenAI model used as the reference price

        Returns:
            Savings amount and percentage (never negative)
        """
        deepseek = self._stats.get(ProviderKind.DEEPSEEK.value)
        if deepseek is None or deepseek.tokens.total == 0:
            return CostSavings()

        estimated = calculate_cost(
            comparison_model, deepseek.tokens.input, deepseek.tokens.output
        )
        savings = estimated - deepseek.cost
        percentage = savings / estimated * 100 if estimated > 0 else 0.0
        return CostSavings(
            amount=max(0.0, savings),
            percentage=max(0.0, percentage),
            comparison=f"DeepSeek vs {comparison_model} for {deepseek.tokens.total:,} tokens",
        )

    def purge_expired(self, today: date | None = None) -> int:
        """Drop daily records older than the retention window.

        Args:
            today: Reference date (UTC today by default)

        Returns:
            Number of daily records removed
        """
        if today is None:
            today = datetime.now(UTC).date()
        cutoff = (today - timedelta(days=self.retention_days)).isoformat()

        removed = 0
        for key in list(self._stats):
            with self._locks[key]:
                current = self._stats[key]
                expired = [day for day in current.daily_usage if day < cutoff]
                if not expired:
                    continue
                updated = current.model_copy(deep=True)
                for day in expired:
                    del updated.daily_usage[day]
                self._stats[key] = updated
                removed += len(expired)

        if removed:
            logger.info("usage_records_purged", removed=removed, cutoff=cutoff)
        return removed

    def start(self) -> None:
        """Launch the periodic purge on the running event loop."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_loop())

    async def stop(self) -> None:
        """Cancel the periodic purge."""
        if self._sweep_task is None:
            return
        self._sweep_task.cancel()
        try:
            await self._sweep_task
        except asyncio.CancelledError:
            pass
        self._sweep_task = None

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.purge_expired()

    def reset(self) -> None:
        """Clear all statistics, alerts and history."""
        with self._registry_lock:
            keys = list(self._stats)
        for key in keys:
            with self._locks[key]:
                self._stats[key] = DetailedUsageStats(provider=key)
                self._history[key] = deque(maxlen=self.history_size)
        self.reset_alerts()

    def reset_alerts(self) -> None:
        with self._alerts_lock:
            self._alerts.clear()
            self._alert_keys.clear()

    def export_data(self) -> str:
        """JSON snapshot of statistics, alerts and performance history."""
        snapshot = {
            "stats": {
                key: stats.model_dump(mode="json") for key, stats in self.get_stats().items()
            },
            "cost_alerts": [alert.model_dump(mode="json") for alert in self.get_cost_alerts()],
            "performance_history": {
                key: [snapshot.model_dump(mode="json") for snapshot in self.get_performance_metrics(key)]
                for key in list(self._history)
            },
            "export_timestamp": datetime.now(UTC).isoformat(),
        }
        return json.dumps(snapshot, indent=2)
