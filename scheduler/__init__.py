"""Recompute Scheduler - durable queue, worker and backfill."""
