# Routes package init
"""
KK's Cafe Backend - API Routes Package
=======================================

Route Inventory:
    - drinks.py:  /api/drinks CRUD (multipart create/update, delete)
    - health.py:  GET /health (record store probe)

Routes stay thin: read the request, call a service, set headers.
"""
