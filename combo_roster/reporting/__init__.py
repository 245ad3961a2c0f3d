"""
combo-roster: Reporting package.

Modules:
    formatters: ASCII renderers for the catalog, roster, and modifier views.
"""
