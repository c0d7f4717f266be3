"""API Layer — FastAPI routes, middleware pipeline and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return JSON; errors use the {"error", "description"} envelope

Design Decisions:
    - Thin routes delegate to services
"""
