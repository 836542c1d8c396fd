from infrastructure.session.file_session_cache import FileSessionCache

__all__ = ["FileSessionCache"]
