from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime
import re

NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 191
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 72

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(v: str) -> str:
    v = v.strip().lower()
    if not v or len(v) > EMAIL_MAX_LENGTH or not EMAIL_PATTERN.match(v):
        raise ValueError("邮箱格式不正确")
    return v


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("名字不能为空")
        if len(v) > NAME_MAX_LENGTH:
            raise ValueError(f"名字长度不能超过 {NAME_MAX_LENGTH} 个字符")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        # bcrypt 只使用前 72 字节
        if len(v) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"密码长度不能少于 {PASSWORD_MIN_LENGTH} 个字符")
        if len(v.encode("utf-8")) > PASSWORD_MAX_LENGTH:
            raise ValueError(f"密码长度不能超过 {PASSWORD_MAX_LENGTH} 字节")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    createdAt: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
