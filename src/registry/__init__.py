"""
Repository Module.

Single owner of all products, users, reviews and orders,
plus the id sequences that number them.
"""
