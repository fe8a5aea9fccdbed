from pydantic import BaseModel, EmailStr, ConfigDict
from typing import Optional
from datetime import datetime

# Schema for admin login credentials
class AdminLogin(BaseModel):
    email: EmailStr
    password: str

# Output schema for the logged-in admin
class AdminResponse(BaseModel):
    id: int
    email: EmailStr
    name: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
