"""凭证模块 / Credential Module"""

from .auth import admin_login, Credential, store_credential

__all__ = ["Credential", "admin_login", "store_credential"]
