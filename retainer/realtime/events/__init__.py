"""Publishers for live retainer updates.

Modules here turn committed domain objects into update events and hand them to
the hub. They never create socket servers or register connection handlers.
"""
