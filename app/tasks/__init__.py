from .ban_expiry import start_ban_sweeper

__all__ = ["start_ban_sweeper"]
