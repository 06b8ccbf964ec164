"""Pydantic schemas for the user settings panel."""

from pydantic import BaseModel, Field, field_validator


class PanelUpdate(BaseModel):
    """Fields omitted from the request are left unchanged; "" or null clears one."""

    smtp_host: str | None = None
    smtp_port: int | None = Field(default=None, ge=1, le=65535)
    smtp_user: str | None = None
    smtp_pass: str | None = None  # Raw password — sealed before storage
    smtp_secure: bool | None = None
    peplink_client_id: str | None = None
    peplink_client_secret: str | None = None  # Sealed before storage

    @field_validator("smtp_host", "smtp_user", "peplink_client_id")
    @classmethod
    def _trim(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip()

    def sealed_updates(self) -> dict[str, str]:
        """Provided fields as the strings stored in the sealed columns."""
        updates = {}
        for key, value in self.model_dump(exclude_unset=True).items():
            if value is None:
                updates[key] = ""
            elif isinstance(value, bool):
                updates[key] = "true" if value else "false"
            else:
                updates[key] = str(value)
        return updates


class PanelRead(BaseModel):
    email: str
    smtp_host: str
    smtp_port: str
    smtp_user: str
    smtp_secure: bool
    has_smtp_pass: bool
    peplink_client_id: str
    has_peplink_client_secret: bool
    undecryptable_fields: list[str] = []
    # secrets are NEVER exposed
