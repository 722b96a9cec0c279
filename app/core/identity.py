from pydantic import BaseModel
from typing import Optional, Dict, Any


class Identity(BaseModel):
    """Caller identity issued by the authentication subsystem for one request."""
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}

    model_config = {"frozen": True}
