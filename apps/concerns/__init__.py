"""Concerns app package.

Tenant requests raised against a booking: moving to another bed, moving
to another room, or anything else the property should look at. Requested
beds are validated against the room catalog and the booking's stay.
"""
