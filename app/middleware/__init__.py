"""
Travel Planner Backend — Middleware Package
=============================================

Request path (outermost first):
    RequestContext → RateLimit → GZip → CORS → route

RequestContext runs outermost so that 429 responses also carry an
X-Request-ID and show up in the access log.
"""
