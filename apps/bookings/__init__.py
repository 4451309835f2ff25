"""Bookings app package.

This app turns a customer's slot lock into a booking, prices it, and
moves it through confirmation, cancellation and completion. Occupancy is
protected by a partial unique index over the occupying statuses, in
addition to the checks performed while the lock is converted.
"""
