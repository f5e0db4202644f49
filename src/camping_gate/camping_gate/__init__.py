"""Camping Gate package.

Entry admission, cash-register shifts and offline visit reconciliation for the
union's camping sites. Organized by feature modules (identity, admission,
shifts, visits, sync, ...) with a thin Flask controller layer over
service/repository layers.
"""
