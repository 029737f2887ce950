"""
User profiles and per-user post listings.
"""
