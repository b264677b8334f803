# ==============================================================================
# OPERATOR REPOSITORY
# ==============================================================================

from typing import Optional

from sqlalchemy import func, select

from thrift_pos.models import Operator
from thrift_pos.repositories.base import BaseRepository


class OperatorRepository(BaseRepository):

    def get(self, operator_id: str) -> Optional[Operator]:
        return self.session.get(Operator, operator_id)

    def get_by_username(self, username: str) -> Optional[Operator]:
        return self.session.execute(
            select(Operator).where(Operator.username == username)
        ).scalar_one_or_none()

    def count(self) -> int:
        return self.session.execute(select(func.count(Operator.id))).scalar_one()
