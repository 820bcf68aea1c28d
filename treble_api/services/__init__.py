# Services package init
"""
Treble API — Services Layer
============================

Service Inventory:
    - moderation.py:       blocked-term loading and whole-word matching
    - file_types.py:       document / thumbnail extension allow-lists
    - pattern_service.py:  record store (lookup, search, create, like)

Services never build HTTP responses; they raise the exceptions in
treble_api.exceptions and the global handlers map those to status codes.
"""
