# ==============================================================================
# USER SERVICE - Operators and login
# ==============================================================================
# Operators are the people allowed into the app. There are no roles: anyone
# who can log in can use every screen.
#
# Passwords are stored as werkzeug hashes, never in clear text.
# ==============================================================================

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from thrift_pos.errors import ConflictError, ValidationError
from thrift_pos.models import Operator
from thrift_pos.repositories import Database, OperatorRepository
from thrift_pos.utils import clean_text

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True)
class OperatorSession:
    """What the session knows about the logged-in operator."""
    operator_id: str
    username: str


class UserService:

    def __init__(self, db: Database, operator_repo: OperatorRepository):
        self.db = db
        self.operator_repo = operator_repo

    def authenticate(self, username, password) -> Optional[OperatorSession]:
        """
        Checks a username/password pair.

        Args:
            username: Login name
            password: Clear-text password

        Returns:
            OperatorSession when valid, None otherwise
        """
        username = (username or "").strip()
        if not username or not password:
            return None

        operator = self.operator_repo.get_by_username(username)
        if operator is None or not check_password_hash(operator.password_hash, password):
            logger.warning("Failed login for %r", username)
            return None

        logger.info("Operator %s logged in", username)
        return OperatorSession(operator_id=operator.id, username=operator.username)

    def get_operator(self, operator_id) -> Optional[Operator]:
        if not operator_id:
            return None
        return self.operator_repo.get(operator_id)

    def create_operator(self, username, password) -> Operator:
        """
        Creates an operator account.

        Raises:
            ValidationError: missing username or short password
            ConflictError: username already taken
        """
        username = clean_text(username, "Username", required=True, max_length=80)
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

        try:
            with self.db.transaction():
                if self.operator_repo.get_by_username(username):
                    raise ConflictError(f'Operator "{username}" already exists.')
                operator = self.operator_repo.add(Operator(
                    username=username,
                    password_hash=generate_password_hash(password),
                ))
        except IntegrityError:
            raise ConflictError(f'Operator "{username}" already exists.')

        logger.info("Operator created: %s", username)
        return operator

    def ensure_admin(self, username, password) -> Optional[Operator]:
        """
        Seeds the first operator when the table is empty.

        Returns:
            The created operator, or None when operators already exist or no
            credentials are configured
        """
        if self.operator_repo.count() > 0:
            return None
        if not username or not password:
            logger.warning("No operators exist and no admin credentials are configured")
            return None
        return self.create_operator(username, password)
