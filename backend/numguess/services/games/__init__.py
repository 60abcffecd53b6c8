"""Game domain services: rules, session engine, statistics and the
statistics reconciliation job.

This package contains pure(ish) domain logic that should be imported by
HTTP routes and socket handlers, keeping transport concerns separated
from core game mechanics.
"""
