"""Bearer token authentication for members and admins."""
