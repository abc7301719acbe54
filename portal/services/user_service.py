# portal/services/user_service.py
import logging
from typing import List, Optional

from portal.errors import NotFoundError, ValidationError
from portal.models.user import User

logger = logging.getLogger(__name__)


class UserService:
    """Just enough user handling for the intake workflow: seed accounts and look them up."""

    def __init__(self, db):
        self.db = db

    def create_user(self, name: str, email: str, role: str) -> User:
        email = email.strip().lower()
        if self.db.get_user_by_email(email):
            raise ValidationError(f"User with email {email} already exists")
        user = User(name=name.strip(), email=email, role=role)
        self.db.insert_user(user.model_dump(by_alias=True))
        logger.info(f"Created {role} user {email}")
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        doc = self.db.get_user_by_id(user_id)
        return User.model_validate(doc) if doc else None

    def require_user(self, user_id: str) -> User:
        user = self.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, role: Optional[str] = None) -> List[User]:
        docs = self.db.get_users_by_role(role) if role else self.db.list_users()
        return [User.model_validate(d) for d in docs]
