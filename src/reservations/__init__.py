"""
Reservation request translation layer.

Validates tool input, translates it into PostgREST requests against the
hosted reservations table and normalizes the backend's responses.
"""
