"""
Source aggregation pipeline.

Fetch (adapters) → extract (extraction) → classify (source_task) →
schedule (orchestrator) → merge (merger) with live progress (progress).
"""
