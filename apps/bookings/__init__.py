"""Bookings app package.

Room reservations: stay pricing, the reservation coordinator that turns a
guest's request into a PENDING/UNPAID reservation, and the checkout session
that collects payment for it.
"""
