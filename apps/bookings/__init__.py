"""Bookings app package.

Bed reservations of a property: availability listings, conflict checks
at commit time, pricing of a stay, the reservation lifecycle and the
payment ledger. Writes are dispatched as commands through the shared
message bus; lifecycle events are fanned out as notification tasks.
"""
