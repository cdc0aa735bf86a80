# Caller identity

from .auth import AuthDependency, Caller, Role, decode_token, issue_token, require_admin, require_user

__all__ = ["AuthDependency", "Caller", "Role", "decode_token", "issue_token", "require_admin", "require_user"]
