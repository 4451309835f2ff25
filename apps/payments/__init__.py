"""Payments app package.

Creates gateway orders for held slots, verifies the gateway's payment
signature and finalises the booking once the payment is proven. Manual
UPI payments are recorded for the venue to verify.
"""
