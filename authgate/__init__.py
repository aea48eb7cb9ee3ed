"""
Auth gateway: Cognito password login with SMS MFA and a session record.
"""

__version__ = "1.0.0"
