"""Bookings app package.

This app encapsulates the booking domain: the booking record and its
status field, the transitions between pending, confirmed and failed, the
reconciliation flows that drive those transitions, and the periodic task
that fails stale pending bookings.
"""
