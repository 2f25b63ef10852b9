"""
Inventory CLI -- command-line front end for the apparel inventory.

Import order spreadsheets, move items through their lifecycle, print label
URLs, and manage locations.  Every command opens the store, initializes it
idempotently, runs, and disposes the store.

Entry point: scripts/inventory.py or python -m scripts.cli
"""

from scripts.cli.main import main

__all__ = ["main"]
