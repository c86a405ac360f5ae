"""
Query scopes restricting which existing rows a resolver preloads.
"""
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import Select

from timeport.db.models import Member, User


class QueryScope(Protocol):
    def apply(self, statement: Select, model) -> Select:
        ...


@dataclass(frozen=True)
class OrganizationScope:
    """Rows owned by one organization (``model.organization_id``)."""
    organization_id: str

    def apply(self, statement: Select, model) -> Select:
        return statement.where(model.organization_id == self.organization_id)


@dataclass(frozen=True)
class OrganizationMemberScope:
    """Users that are members of one organization."""
    organization_id: str

    def apply(self, statement: Select, model) -> Select:
        return statement.join(Member, Member.user_id == User.id).where(
            Member.organization_id == self.organization_id
        )
