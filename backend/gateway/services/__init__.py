# Services package init
"""
Backend Gateway — Services Layer
==================================

What:  Business logic layer sitting between routes (HTTP) and repositories.

Service Inventory:
    - ClientService: not-found translation and existence-then-act over a
      ClientRepositoryBase implementation
"""
