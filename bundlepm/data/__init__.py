"""
Persisted state for the package manager.

This package is responsible for:
* The fixed filesystem layout (configuration, ledger, package-list cache).
* Initializing that layout on first use.
* Reading and writing the package-list cache and building the Catalog from it.
* Reading and writing the install ledger.
"""
