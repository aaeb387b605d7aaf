"""
Finance Tracker - Source Package

The core of a personal finance tracker: a swappable store for
transactions, categories, budgets and savings goals, plus read-only
reports and a progressive income-tax estimate computed from it.

DESIGN PRINCIPLES:
1. The store owns all records; nothing else holds a live reference
2. Storage backends are swappable behind one contract
3. Validation happens at the boundary, before the store is called
4. Reports are pure functions over a snapshot
5. Money arithmetic is Decimal, never float
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
