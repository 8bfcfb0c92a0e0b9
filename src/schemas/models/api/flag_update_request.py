from pydantic import BaseModel

from src.schemas.enums.content_flag import ContentFlag


class FlagUpdateRequest(BaseModel):
    flag: ContentFlag
    value: bool
