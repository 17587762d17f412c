"""
Core module for shared domain infrastructure.

This module contains:
- Domain events, exceptions and value objects
- Event bus and audit handlers
- Observability middleware and metrics
"""
