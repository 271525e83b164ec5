"""
Account maintenance services.
"""

from .account_service import AccountService

__all__ = ["AccountService"]
