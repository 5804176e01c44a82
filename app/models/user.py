from pydantic import BaseModel, EmailStr


class User(BaseModel):
    id: str
    name: str = ""
    email: EmailStr | None = None
