"""
Entity Matcher

Decides whether two records describe the same real-world person.

The heuristic is deliberately permissive: an identical mobile number is
enough on its own. A recycled number shared by two different people will
therefore be merged into one party.
"""

from credit_ledger.models.ledger import Entity


def same_entity(a: Entity, b: Entity) -> bool:
    """Same mobile number, or the same non-empty email on both sides."""
    if a.mobile == b.mobile:
        return True
    return bool(a.email) and bool(b.email) and a.email == b.email
