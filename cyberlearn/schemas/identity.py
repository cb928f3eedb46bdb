from pydantic import BaseModel


class Identity(BaseModel):
    """The authenticated user, as resolved from the auth provider's token."""
    user_id: str
