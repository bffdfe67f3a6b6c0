"""Administrator persistence: the credential store used by login, guards and admin routes."""

import logging
from typing import Literal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import Conflict
from app.models import Administrator

logger = logging.getLogger(__name__)

IdentifierField = Literal["email", "username"]

# Message returned when a unique field collides with another administrator.
IN_USE_MESSAGES = {
    "email": "Email is already in use.",
    "username": "Username is already in use.",
}


class AdminRepository:
    """SQLAlchemy-backed lookups and writes on the administrators table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _column(self, field: IdentifierField):
        if field == "email":
            return Administrator.email
        if field == "username":
            return Administrator.username
        raise ValueError(f"Unsupported identifier field: {field!r}")

    def find_by_identifier(self, field: IdentifierField, value: str) -> Administrator | None:
        return (
            self.session.query(Administrator)
            .filter(self._column(field) == value)
            .first()
        )

    def find_by_id(self, admin_id: int) -> Administrator | None:
        return self.session.query(Administrator).filter(Administrator.id == admin_id).first()

    def exists_with_identifier(
        self,
        field: IdentifierField,
        value: str,
        exclude_id: int | None = None,
    ) -> bool:
        query = self.session.query(Administrator.id).filter(self._column(field) == value)
        if exclude_id is not None:
            query = query.filter(Administrator.id != exclude_id)
        return query.first() is not None

    def ensure_available(
        self,
        field: IdentifierField,
        value: str,
        exclude_id: int | None = None,
    ) -> None:
        """Raise Conflict if another administrator already uses value for field."""
        if self.exists_with_identifier(field, value, exclude_id=exclude_id):
            raise Conflict(IN_USE_MESSAGES[field])

    def list_all(self) -> list[Administrator]:
        return self.session.query(Administrator).order_by(Administrator.id).all()

    def create(self, username: str, email: str, password_hash: str) -> Administrator:
        admin = Administrator(username=username, email=email, password_hash=password_hash)
        self.session.add(admin)
        self._commit()
        self.session.refresh(admin)
        return admin

    def update(self, admin: Administrator, **fields: str) -> Administrator:
        """Apply fields to admin and commit as a single row update."""
        for name, value in fields.items():
            setattr(admin, name, value)
        self._commit()
        self.session.refresh(admin)
        return admin

    def delete(self, admin_id: int) -> bool:
        deleted = (
            self.session.query(Administrator)
            .filter(Administrator.id == admin_id)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted > 0

    def _commit(self) -> None:
        # The unique indexes close the gap between the availability check and the write.
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning("Administrator write rejected by unique constraint: %s", e.orig)
            raise Conflict("Username or email is already in use.") from e
