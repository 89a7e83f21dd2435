"""
Naira Power - Source Package

A shared household electricity tracker. Family members sign in by email,
gather under a family with an invite code, and record prepaid meter
recharges that everyone in the family can see.

DESIGN PRINCIPLES:
1. Every record belongs to exactly one family
2. The session remembers who, never what
3. Invariants live at the storage boundary
4. Every step must be auditable
5. Storage medium is swappable
"""

__version__ = "1.0.0"
__author__ = "Naira Power Team"
