"""
docrest - a schema-less JSON document CRUD service over an embedded store.
"""

__version__ = "0.1.0"
