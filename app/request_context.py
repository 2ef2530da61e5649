from dataclasses import dataclass


@dataclass
class RequestContext:
    """Request-scoped context identifying the authenticated profile"""
    user_id: str
    api_key_id: str
