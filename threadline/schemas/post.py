from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime

TITLE_MAX_LENGTH = 255


class PostCreate(BaseModel):
    title: str
    content: str

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("标题不能为空")
        if len(v) > TITLE_MAX_LENGTH:
            raise ValueError(f"标题长度不能超过 {TITLE_MAX_LENGTH} 个字符")
        return v

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("正文不能为空")
        return v


class PostResponse(BaseModel):
    id: int
    authorId: str
    title: str
    content: str
    createdAt: datetime

    model_config = ConfigDict(from_attributes=True)
