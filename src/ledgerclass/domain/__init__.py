"""Domain layer for ledgerclass application.

Services are resolved lazily so that the database layer can import
ledgerclass.domain.entities without pulling the services (which import the
database layer) in first.
"""

_SERVICES = {
    "FamilyService": "ledgerclass.domain.family",
    "HierarchyValidationService": "ledgerclass.domain.hierarchy_validation",
    "LedgerService": "ledgerclass.domain.ledger",
    "RetroactiveService": "ledgerclass.domain.retroactive",
    "RuleService": "ledgerclass.domain.rules",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
