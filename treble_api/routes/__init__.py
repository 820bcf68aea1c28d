# Routes package init
"""
Treble API — Routes Package
============================

Route Inventory:
    - patterns.py:  GET  {prefix}/                 (banner)
                    GET  {prefix}/pattern/{slug}   (fetch by slug)
                    GET  {prefix}/search?q=        (search)
                    POST {prefix}/upload           (create)
                    POST {prefix}/like/{slug}      (increment likes)
    - health.py:    GET  /health                   (service health check)

Routes stay thin: read the request, call PatternService, shape the response.
"""
