"""Guests app package.

Resolves the guest identity a reservation is made for. Guests are looked up
by email and created on first sight; the hotel backend owns the records.
"""
