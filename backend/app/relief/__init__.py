"""
relief — Seismic-impact aggregation and relief deployment prioritisation.

Sub-modules:
    sources/         — Seismic data sources (PHIVOLCS page, USGS query API)
    fetcher          — Primary/secondary failover orchestration
    date_parser      — Source timestamp parsing with explicit fallback
    locations        — Fixed registry of monitored municipalities
    impact           — Magnitude × distance → severity policy
    recommendations  — Severity tier → field action checklist
    aggregator       — Per-location best-match deduplication + summary
    cache            — Time-boxed single-slot report cache
    service          — Report assembly: cache → fetch → rank → envelope
    models           — Data structures shared across the pipeline
"""
