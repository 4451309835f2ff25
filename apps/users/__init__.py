"""Users app package.

Defines the platform user with one of three roles: customers book slots,
providers own venues and verify their bookings, admins oversee everything.
Use ``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout the
project.
"""
