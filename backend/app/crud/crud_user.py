from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from .. import models, schemas
from ..utils.auth import get_password_hash, normalize_email


class CRUDUser:
    def get_user(self, db: Session, user_id: int) -> Optional[models.User]:
        return db.query(models.User).filter(models.User.id == user_id).first()

    def get_user_by_email(self, db: Session, email: str) -> Optional[models.User]:
        return db.query(models.User).filter(models.User.email == normalize_email(email)).first()

    def create_user(self, db: Session, user: schemas.UserCreate) -> models.User:
        db_user = models.User(
            email=normalize_email(user.email),
            password=get_password_hash(user.password),
            full_name=user.full_name,
            role=user.role,
        )
        db.add(db_user)
        db.commit()
        db.refresh(db_user)
        return db_user

    def update_user(self, db: Session, db_user: models.User, user_in: schemas.UserUpdate) -> models.User:
        for key, value in user_in.model_dump(exclude_unset=True).items():
            setattr(db_user, key, value)
        db.commit()
        db.refresh(db_user)
        return db_user

    def record_login(self, db: Session, db_user: models.User, refresh_hash: str, refresh_days: int) -> None:
        db_user.update_last_login()
        self.store_refresh_token(db, db_user, refresh_hash, refresh_days)

    def store_refresh_token(
        self, db: Session, db_user: models.User, refresh_hash: Optional[str], refresh_days: int = 0
    ) -> None:
        db_user.refresh_token_hash = refresh_hash
        db_user.refresh_token_expires_at = (
            datetime.utcnow() + timedelta(days=refresh_days) if refresh_hash else None
        )
        db.commit()

    def deactivate(self, db: Session, db_user: models.User) -> models.User:
        db_user.deactivate()
        db.commit()
        return db_user


user = CRUDUser()
