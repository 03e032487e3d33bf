"""
Pydantic schemas for Clerk webhook events.

Only the fields the profile store needs are declared; everything else
in Clerk's payload is ignored.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ClerkEmailAddress(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email_address: str | None = None


class ClerkUserData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    image_url: str | None = None
    email_addresses: list[ClerkEmailAddress] = []
    public_metadata: dict[str, Any] = {}

    def profile_fields(self) -> tuple[str, dict]:
        """Map the Clerk user onto ``user_profiles`` columns."""
        meta = self.public_metadata or {}
        fields = {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "username": self.username,
            "email": self.email_addresses[0].email_address if self.email_addresses else None,
            "gender": meta.get("gender"),
            "avatar_url": self.image_url,
        }
        # Optional profile details kept in public metadata by the client app
        for key in ("display_name", "interests", "location", "date_of_birth"):
            if meta.get(key) is not None:
                value = meta[key]
                if key == "interests" and isinstance(value, list):
                    value = ", ".join(str(v) for v in value)
                fields[key] = value
        return self.id, fields


class ClerkEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    data: ClerkUserData
