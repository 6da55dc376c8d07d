"""
Repository layer for the Commerce API.

One module per resource. Every function takes the MongoDB database handle
as its first argument and performs a single storage round trip.
"""
