import logging
from typing import List

from cyberlearn.core.constants import NoticeVariantEnum
from cyberlearn.schemas.notice import Notice

logger = logging.getLogger(__name__)


class Notifier:
    """Collects the notices raised while serving one request."""

    def __init__(self):
        self.notices: List[Notice] = []

    def notify(self, title: str, description: str, variant: NoticeVariantEnum = NoticeVariantEnum.DEFAULT) -> Notice:
        notice = Notice(title=title, description=description, variant=variant)
        self.notices.append(notice)
        logger.debug(f"Notice raised: {title} - {description}")
        return notice

    def success(self, title: str, description: str) -> Notice:
        return self.notify(title, description)

    def error(self, title: str, description: str) -> Notice:
        return self.notify(title, description, NoticeVariantEnum.DESTRUCTIVE)

    def sign_in_required(self, description: str) -> Notice:
        return self.error("Sign in required", description)


def get_notifier() -> Notifier:
    return Notifier()
