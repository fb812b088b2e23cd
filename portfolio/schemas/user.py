from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):  # type: ignore[misc]
    """
    Profile of a connected user held by the presence directory.

    Only ``name`` is required; any extra fields sent by the client are kept
    and echoed back unchanged.
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
