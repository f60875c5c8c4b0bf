from pydantic import BaseModel, field_validator

MIN_PASSWORD_LENGTH = 6


def validate_password_length(v: str) -> str:
    if len(v) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(v) > 72:
        raise ValueError("Password must be at most 72 characters long")
    return v


class MessageResponse(BaseModel):
    message: str


class PatchModel(BaseModel):
    """Base for partial updates.

    An empty string or a zero number means "keep the current value", so both
    are turned into None before field validation. Services only apply fields
    that are not None.
    """

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, bool):
            return v
        if isinstance(v, str) and v.strip() == "":
            return None
        if isinstance(v, (int, float)) and v == 0:
            return None
        return v
