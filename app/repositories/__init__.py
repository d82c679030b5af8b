# Repositories package init
"""
Travel Planner Backend — Store Gateways
=========================================

What:  Query objects that sit between services and the database.
Why:   Services decide WHAT to read and when; repositories know HOW to read it.

Repository Inventory:
    - CountryRepository: filtered/paginated country reads, continent counts,
      connectivity flag
"""
