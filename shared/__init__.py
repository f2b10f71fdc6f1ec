"""
Shared Kernel

Base classes and utilities shared across the booking and property
contexts: domain building blocks, the unit of work, the message bus,
encryption helpers and the API error envelope.
"""
