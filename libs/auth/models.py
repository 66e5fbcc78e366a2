from typing import Optional

from pydantic import BaseModel, Field


class AuthUser(BaseModel):
    """
    Represents an authenticated warehouse staff member from a Supabase token.
    """

    user_id: str = Field(..., alias="sub")
    email: Optional[str] = None
    role: str = "authenticated"

    model_config = {"populate_by_name": True}

    @property
    def display_name(self) -> str:
        """Name recorded on stock movements and adjustments."""
        return self.email or self.user_id
