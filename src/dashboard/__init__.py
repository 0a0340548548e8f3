"""
Dashboard core: state, orchestration and configuration.

Modules:
    state        — Immutable ViewState snapshot and status enums
    orchestrator — Debounced search, location loads, partial-failure merging
    config       — Environment-driven configuration and client wiring
    formatting   — Temperature display helpers
"""
