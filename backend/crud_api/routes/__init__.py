# Routes package init
"""
Document CRUD Gateway — API Routes Package
===========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - documents.py:  POST   {prefix}/create
                     GET    {prefix}/read/{collection}/{id}
                     PUT    {prefix}/update/{collection}/{id}
                     DELETE {prefix}/delete/{collection}/{id}
    - health.py:     GET    /health

Routes stay thin: extract inputs, call DocumentService, pick the status code.
"""
