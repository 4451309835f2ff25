"""Notifications app package.

Sends transactional booking emails. The functions here are called from
Celery tasks in the bookings app so that mail delivery never blocks a
request.
"""
