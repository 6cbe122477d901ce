"""Payments app package.

Issues provider orders for bookings, verifies signed payment receipts, and
builds UPI deep links for the manual payment flow. This app owns no tables:
payment state lives on the booking record.
"""
