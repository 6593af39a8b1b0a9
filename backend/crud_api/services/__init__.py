# Services package init
"""
Document CRUD Gateway — Services Layer
=======================================

What:  The layer between routes (HTTP) and the database handle.

Service Inventory:
    - DocumentService: one database call per CRUD operation, with a shared
      error adapter (operation_guard) mapping failures to application errors.
"""
