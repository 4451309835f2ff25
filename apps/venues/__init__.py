"""Venues app package.

Holds the bookable catalogue: sports, provider-owned venues and the
individual tables/courts ("resources") that customers reserve by the hour.
"""
