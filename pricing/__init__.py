"""
Pricing module - asynchronous cost dispatch.

This module handles:
- Fan-out of per-line pricing tasks on request completion
- Pricing backends (external HTTP pricer or local formula)
- Callback authentication and sub-total ingestion
"""
