"""
Accounts: registration, login, and bearer-token identity for other routes.
"""
