"""
Authentication schemas for request/response validation
"""
from pydantic import BaseModel, Field, ConfigDict


class Token(BaseModel):
    """JWT token response"""
    access_token: str
    token_type: str = "bearer"
    username: str


class UserCreate(BaseModel):
    """User registration request"""
    username: str = Field(..., min_length=3, max_length=30)
    password: str = Field(..., min_length=6)

    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "pharmacy",
                "password": "secure_password"
            }
        }
    }


class UserResponse(BaseModel):
    """Authenticated user"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
