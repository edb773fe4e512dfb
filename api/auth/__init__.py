"""
Accounts and one-time e-mail codes.
"""
