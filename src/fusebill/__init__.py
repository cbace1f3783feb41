"""
Fusebill billing client.

A small client for the Fusebill subscription-billing API: look up an
invoice's outstanding balance and write invoices off.
"""

__version__ = "0.1.0"
