"""Locations app package.

This app holds the pod locations and the availability calculator that
derives remaining pod counts from confirmed bookings.
"""
