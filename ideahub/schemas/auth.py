from pydantic import BaseModel, Field

class LoginRequest(BaseModel):
    email: str
    password: str

class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=6)
    username: str | None = None

class Token(BaseModel):
    access_token: str
    refresh_token: str
