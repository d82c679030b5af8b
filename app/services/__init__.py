"""
Travel Planner Backend — Services Layer
=========================================

Service Inventory:
    - country_service.py:    CountryService, the read path for country data
    - cache_keys.py:         cache key names and the filtered-query key builder
    - fallback_countries.py: built-in dataset served while the database is down
"""
