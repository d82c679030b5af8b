"""
Travel Planner Backend — API Routes
=====================================

Route Inventory:
    - countries.py: GET  /api/countries                  (filtered, paginated)
                    GET  /api/countries/all              (every country)
                    GET  /api/countries/popular          (popular destinations)
                    GET  /api/countries/continents/list  (continent counts)
                    POST /api/countries/cache/invalidate (bearer token)
                    GET  /api/countries/{code}           (alpha-2 or alpha-3)
    - health.py:    GET  /health

Handlers only translate HTTP to service calls; errors raised by the service
are mapped to status codes by the handlers registered in main.py.
"""
