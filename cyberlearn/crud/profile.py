from sqlalchemy.orm import Session
from typing import Dict, List
from pydantic import BaseModel

from cyberlearn.crud.base import CRUDBase
from cyberlearn.models.profile import Profile

class CRUDProfile(CRUDBase[Profile, BaseModel, BaseModel]):

    def get_by_user_ids(self, db: Session, user_ids: List[str]) -> Dict[str, Profile]:
        if not user_ids:
            return {}
        profiles = db.query(Profile).filter(Profile.user_id.in_(user_ids)).all()
        return {p.user_id: p for p in profiles}


profile = CRUDProfile(Profile)
