from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.models.user import User


class UserRepository:
    """Repository for owning-user records mirrored from the auth service"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_subject(self, auth_user_id: str) -> User | None:
        return self.db.query(User).filter(User.auth_user_id == auth_user_id).first()

    def get_or_create(self, auth_user_id: str) -> User:
        """
        Get the user for a JWT subject, creating it on first sight.

        Two first requests from the same subject can race on the unique
        auth_user_id; the loser rolls back and reads the winner's row.
        """
        user = self.get_by_subject(auth_user_id)
        if user:
            return user

        user = User(auth_user_id=auth_user_id)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return self.get_by_subject(auth_user_id)
        self.db.refresh(user)
        return user
