"""
Shared Kernel

Base classes and utilities shared across the locations, bookings and
payments apps: the error taxonomy, domain events and the unit of work that
publishes them after commit.
"""
