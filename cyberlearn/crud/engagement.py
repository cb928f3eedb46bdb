from sqlalchemy.orm import Session
from typing import List, Optional

from cyberlearn.crud.base import CRUDBase
from cyberlearn.models.engagement import UserEngagement
from pydantic import BaseModel

class CRUDUserEngagement(CRUDBase[UserEngagement, BaseModel, BaseModel]):

    def get_top(self, db: Session, limit: int = 100) -> List[UserEngagement]:
        return (
            db.query(UserEngagement)
            .order_by(UserEngagement.total_points.desc(), UserEngagement.id)
            .limit(limit)
            .all()
        )

    def get_by_user(self, db: Session, user_id: str) -> Optional[UserEngagement]:
        return db.query(UserEngagement).filter(UserEngagement.user_id == user_id).first()

    def count_with_more_points(self, db: Session, total_points: int) -> int:
        return (
            db.query(UserEngagement)
            .filter(UserEngagement.total_points > total_points)
            .count()
        )


user_engagement = CRUDUserEngagement(UserEngagement)
