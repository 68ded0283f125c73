"""Prometheus exporter helpers."""

from __future__ import annotations

from prometheus_client import Counter


generation_requests_total = Counter(
    "generation_requests_total",
    "Total number of accepted image generation requests.",
)

generation_outcomes_total = Counter(
    "generation_outcomes_total",
    "Image generation jobs that reached a terminal status.",
    ["status"],
)
