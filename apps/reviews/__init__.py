"""Reviews app package.

Customers rate a venue from 1 to 5 once per completed booking.
"""
