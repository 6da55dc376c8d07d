"""
Pydantic schemas for User API operations.

These schemas define the request/response structure for the /users endpoints.
The password is accepted on write but never serialized in a response.
"""

from pydantic import BaseModel, Field

# ============================================================================
# User Schemas
# ============================================================================


class UserUpdate(BaseModel):
    """
    Schema for updating an existing User.

    All fields are optional; empty values mean "not provided" and leave the
    stored value untouched. The email is taken from the path and cannot be
    changed through this schema.
    """

    name: str = Field(
        default="",
        description="Display name of the user",
        examples=["Ann"],
    )
    password: str = Field(
        default="",
        description="New password",
        examples=["p2"],
    )


class UserCreate(UserUpdate):
    """Schema for creating a new User."""

    email: str = Field(
        default="",
        description="Email address, used as the lookup key",
        examples=["ann@x.com"],
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Ann",
                    "email": "ann@x.com",
                    "password": "p1",
                }
            ]
        }
    }


class User(BaseModel):
    """User as returned by the API."""

    id: str = Field(..., description="Storage-assigned identifier")
    name: str = ""
    email: str = ""


class UserEnvelope(BaseModel):
    """Response body wrapping a single user."""

    user: User
