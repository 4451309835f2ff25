"""Reservations app package.

This app owns the time-slot reservation mechanism: it derives the daily
slot catalogue for a resource, grants short-lived exclusive holds
("slot locks") while a customer pays, and reclaims holds whose deadline
has passed. Exclusivity is enforced by a partial unique index on active
locks, so the guarantees hold across processes and instances.
"""
