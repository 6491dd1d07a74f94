"""
Compliance Desk Services

Note: Imports are lazy so that the record store (which needs Flask-SQLAlchemy)
and the gateway (which needs google-genai) load only when used.
Use explicit imports from submodules when needed:
    from hts_compliance.services.record_store import RecordStore
    from hts_compliance.services.classification_gateway import ClassificationGateway
"""


def __getattr__(name):
    """Lazy import to avoid circular imports."""
    if name == 'RecordStore':
        from hts_compliance.services.record_store import RecordStore
        return RecordStore

    if name in ('ClassificationGateway', 'GeminiProvider', 'ClassificationProvider'):
        from hts_compliance.services import classification_gateway
        return getattr(classification_gateway, name)

    if name in ('AnalysisRequest', 'build'):
        from hts_compliance.services import context_builder
        return getattr(context_builder, name)

    if name in ('SearchSession', 'SearchOutcome'):
        from hts_compliance.services import search_session
        return getattr(search_session, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
