"""
Travel Planner Backend — Application Package
==============================================

Layers, top to bottom:

    ┌─────────────────────────────────────┐
    │   routes/          HTTP surface     │  query params in, JSON envelopes out
    ├─────────────────────────────────────┤
    │   services/        CountryService   │  cache-aside, fallback selection
    ├──────────────────┬──────────────────┤
    │  repositories/   │  cache.py        │  SQL queries │ Redis / in-memory
    ├──────────────────┴──────────────────┤
    │   models/ schemas/ database.py      │  ORM rows, wire types, engine
    └─────────────────────────────────────┘

Only the repository and cache modules talk to external systems; everything
above them can be exercised with in-memory fakes.
"""

__version__ = "1.0.0"
