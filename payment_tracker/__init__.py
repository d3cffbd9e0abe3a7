"""
Payment Tracker - Source Package

Expense and payment tracking for a small business: payment records live in
a JSON document on GitHub, amounts are kept in their own currency and
reported in a single currency using daily exchange rates.

DESIGN PRINCIPLES:
1. The whole document is read and written at once, guarded by its version token
2. Fail visibly on save, never silently drop a change
3. Exchange rates fail soft - a stale table beats a blocked dashboard
4. Every mutation is auditable
5. Storage and rate sources are swappable
"""

__version__ = "1.0.0"
__author__ = "Payment Tracker Team"
