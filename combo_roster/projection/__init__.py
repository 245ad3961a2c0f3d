"""
Read-only projections over the settings and the modifier graph.

Modules:
    unused: unused / filler modifier sets, drag highlight, forbidding.
"""
