"""
User Directory

Mirrors authenticated principals into the users table so claims, items and
audit rows can reference them. No credentials are stored here.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from unifind.core.models import Principal
from unifind.storage.tables import User

logger = logging.getLogger(__name__)


class UserDirectory:
    def __init__(self, session: Session):
        self.session = session

    def ensure(self, principal: Principal) -> User:
        """Insert the principal's identity, or refresh it if it changed."""
        user = self.session.get(User, principal.id)
        if user is None:
            user = self._insert(principal)
        else:
            self._refresh(user, principal)
        self.session.flush()
        return user

    def _insert(self, principal: Principal) -> User:
        user = User(
            id=principal.id,
            university_id=principal.university_id,
            full_name=principal.full_name,
            email=principal.email,
            role=principal.role,
        )
        try:
            with self.session.begin_nested():
                self.session.add(user)
                self.session.flush()
        except IntegrityError:
            # A concurrent transaction registered the same principal first.
            existing = self.session.get(User, principal.id, populate_existing=True)
            if existing is None:
                raise
            logger.warning(f"User {principal.id} was registered concurrently; reusing the row")
            self._refresh(existing, principal)
            return existing

        logger.info(f"Registered user {principal.id} ({principal.role.value})")
        return user

    @staticmethod
    def _refresh(user: User, principal: Principal) -> None:
        user.full_name = principal.full_name or user.full_name
        user.email = principal.email or user.email
        user.university_id = principal.university_id or user.university_id
        user.role = principal.role
