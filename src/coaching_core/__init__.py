"""Booking financial lifecycle engine for a children's sports-coaching business.

Refund policy evaluation, discount stacking, block-booking ledgers and
session transfer reconciliation. Every operation is pure: it takes the
current entity state and returns the next one.
"""

__version__ = "0.1.0"
