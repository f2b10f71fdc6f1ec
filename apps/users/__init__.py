"""Users app: platform accounts and roles read by the booking core."""
