# Routes package init
"""
Backend Gateway — API Routes Package
======================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles a specific resource or action.

Route Inventory:
    - health.py:   GET /                    (service banner)
                   GET /health              (service health check)
    - clients.py:  /clients/...             (clients CRUD, ORM and raw SQL)

Routes stay thin: extract input, call the service, shape the response.
"""
