from pydantic import BaseModel, field_validator


class UserCreate(BaseModel):
    name: str
    email: str
    password: str

    @field_validator("name", "email", "password", mode="before")
    @classmethod
    def _required_text(cls, value):
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name, email and password are required")
        return value


class UserLogin(BaseModel):
    email: str
    password: str

    @field_validator("email", "password", mode="before")
    @classmethod
    def _present(cls, value):
        if not isinstance(value, str) or not value:
            raise ValueError("Email and password are required")
        return value


class User(BaseModel):
    id: str
    name: str
    email: str

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    token: str
    user: User
