# storefront/models/user.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Persistent user profile.

    Identity:
      - id: MUST match the "sub" claim of the session token

    Role:
      - "user" | "admin"
      - "guest" is represented by the absence of a row / missing token.

    Passwords live with the session issuer; this table only mirrors
    identity, name, and application role.
    """

    __tablename__ = "users"

    id: int = Field(
        primary_key=True,
        description="Matches the token 'sub' claim",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from the session token",
    )

    name: str = Field(
        max_length=50,
        description="Customer display name; first part of email by default",
    )

    # Application role
    role: str = Field(
        default="user",
        index=True,
        description="Application role: user | admin",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
