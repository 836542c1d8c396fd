from domain.users.user import UserRecord, UserRef, is_valid_email, normalize_email

__all__ = ["UserRecord", "UserRef", "is_valid_email", "normalize_email"]
