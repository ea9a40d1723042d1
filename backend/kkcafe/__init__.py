"""
KK's Cafe Backend - Application Package
========================================

A small drink menu service: drinks with a name, a description and an
ordered list of images, stored in a flat JSON file (or embedded SQLite),
with uploaded images kept in a local directory.

    ┌─────────────────────────────────────┐
    │        Routes (HTTP boundary)       │  ← form parsing, uploads, headers
    ├─────────────────────────────────────┤
    │   Services (DrinkService, images)   │  ← lifecycle, image merge rules
    ├─────────────────────────────────────┤
    │        Schemas (pydantic Drink)     │  ← record + API contract
    ├─────────────────────────────────────┤
    │   Stores (JSON file / SQL / memory) │  ← whole-list load & save
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
