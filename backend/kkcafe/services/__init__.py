# Services package init
"""
KK's Cafe Backend - Services Layer
===================================

What:  Business logic layer sitting between routes (HTTP) and stores (persistence).

Service Inventory:
    - image_resolver: Pure merge rules for a drink's image list
    - FileService:    Upload validation, storage, and image file cleanup
    - DrinkService:   Create / update / delete lifecycle on top of a DrinkStore
"""
