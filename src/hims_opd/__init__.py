"""HIMS OPD backend package.

Organized by feature modules (shifts, receipts, expenses, reports, ...) with a
thin Flask controller layer over service and repository layers.
"""
