import uuid


def new_session_id() -> str:
    """Time-based unique token identifying one tab for its whole lifetime."""
    return uuid.uuid1().hex


def session_key(prefix: str, session_id: str) -> str:
    return f"{prefix}{session_id}"
