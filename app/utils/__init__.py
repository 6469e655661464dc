__all__ = [
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "decode_access_token",
    "authenticate",
    "get_current_account",
    "require_admin",
    "oauth2_scheme",
    "is_email_enabled",
    "send_email",
    "utcnow",
]


def __getattr__(name):
    if name in {
        "verify_password",
        "get_password_hash",
        "create_access_token",
        "decode_access_token",
        "authenticate",
        "get_current_account",
        "require_admin",
        "oauth2_scheme",
    }:
        from . import security as _security
        return getattr(_security, name)
    if name in {"is_email_enabled", "send_email"}:
        from . import email as _email
        return getattr(_email, name)
    if name == "utcnow":
        from .timeutils import utcnow
        return utcnow
    raise AttributeError(f"module 'app.utils' has no attribute '{name}'")
