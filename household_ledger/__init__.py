"""
Household Ledger - Source Package

A single-user household expense tracker: log dated expenses against a
fixed budget, watch the running balance, delete or reset entries.
Runs on a local in-memory list or a live-synced Firestore collection.

DESIGN PRINCIPLES:
1. Admission before persistence - no expense may overdraw the budget
2. The store is the only source of truth after a write
3. Failures become notices, never crashes
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Household Ledger Team"
