"""docrest core -- storage-independent collection and document primitives.

Architecture::

    errors.py          Structured error hierarchy (DocRestError)
    logging.py         structlog configuration
    settings.py        pydantic-settings base
    documents.py       Schema-less document normalisation
    protocols.py       DocumentStore facade + Query
    stores/            Memory and SQLite store backends
    query.py           QueryTranslator (positions -> documents)
    identifiers.py     IdentifierPolicy: TokenPolicy / PositionalPolicy
    registry.py        CollectionRegistry (ensure / bootstrap)
"""
