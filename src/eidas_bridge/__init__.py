"""
eidas_bridge — PRID generation and Level-of-Assurance negotiation for an
eIDAS connector.

Derives stable, per-country pseudonymous identifiers (PRID) from foreign eIDAS
person identifiers under a hot-reloadable policy, and translates assurance
levels between the national and the eIDAS vocabularies.

Built on the Railway-Oriented Programming (ROP) framework for
explicit, composable, functional error handling.
"""

__version__ = "0.1.0"
