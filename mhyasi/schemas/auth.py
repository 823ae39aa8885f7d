from pydantic import BaseModel


class RegisterRequest(BaseModel):
    username: str = ""
    password: str = ""
    shop_name: str = ""
    shop_address: str = ""


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class ProfileUpdate(BaseModel):
    shop_name: str = ""
    shop_address: str = ""
