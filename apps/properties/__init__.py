"""Properties app package.

Holds the property record, its approval status and the room
configuration (floors, rooms, beds and sharing-type prices) that the
booking core reads as its catalog.
"""
