"""Lightning Network integration for lnrelay.

Relays settled LND invoices to any number of listeners and creates
payment requests with templated memos.
"""
