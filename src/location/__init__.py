"""
Location-aware data fetching modules for the Breeze dashboard.

Modules:
    resolver     — City search (Open-Meteo geocoding) and reverse lookups
    air_quality  — Fetch Open-Meteo current air quality
    pollen       — Fetch pollen indices from the Breeze pollen proxy
    climate      — Fetch Open-Meteo archive temperatures per reference year
    provider     — Device location permission and one-shot fixes
    http         — Shared JSON fetch with error mapping
    errors       — Error taxonomy
"""
