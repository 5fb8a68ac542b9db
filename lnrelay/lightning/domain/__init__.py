"""Domain layer for the Lightning integration.

Contains value objects, enums, domain events and the memo formatter.
"""
