from pydantic import BaseModel, ConfigDict

from cyberlearn.core.constants import NoticeVariantEnum


class Notice(BaseModel):
    """A transient, user-visible notification (rendered as a toast by the client)."""
    title: str
    description: str
    variant: NoticeVariantEnum = NoticeVariantEnum.DEFAULT

    model_config = ConfigDict(use_enum_values=True)
