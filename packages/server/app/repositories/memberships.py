"""
Membership store: organizations, projects, users, memberships, invitations.

``MembershipStore`` is the interface the membership services depend on;
``SqlMembershipStore`` implements it on the request's ``AsyncSession``.
Create methods flush immediately so uniqueness violations surface at the
write that caused them, as ``DuplicateRecordError``; each insert runs in
a savepoint so the rest of the request transaction survives the failure.
"""

from __future__ import annotations

import uuid
from typing import Optional, Protocol, Sequence

import structlog
from fastapi import Depends
from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.database import get_session
from app.core.errors import DuplicateRecordError
from app.models.invitation import MembershipInvitation
from app.models.org_membership import OrganizationMembership
from app.models.organization import Organization
from app.models.project import Project
from app.models.project_membership import ProjectMembership
from app.models.user import User
from orgadmin_shared.schemas.common import Role

log = structlog.get_logger()


def _role_value(role: Role | str) -> str:
    return Role(role).value


class MembershipStore(Protocol):
    async def find_organization(self, org_id: uuid.UUID) -> Optional[Organization]: ...

    async def find_project(
        self, project_id: uuid.UUID, org_id: uuid.UUID, exclude_deleted: bool = True
    ) -> Optional[Project]: ...

    async def find_user_by_email(self, email: str) -> Optional[User]: ...

    async def find_user(self, user_id: uuid.UUID) -> Optional[User]: ...

    async def find_org_membership(
        self, org_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[OrganizationMembership]: ...

    async def create_org_membership(
        self, org_id: uuid.UUID, user_id: uuid.UUID, role: Role
    ) -> OrganizationMembership: ...

    async def upsert_org_membership(
        self, org_id: uuid.UUID, user_id: uuid.UUID, role: Role
    ) -> OrganizationMembership: ...

    async def delete_org_memberships(self, org_id: uuid.UUID, user_id: uuid.UUID) -> int: ...

    async def create_project_membership(
        self,
        project_id: uuid.UUID,
        user_id: uuid.UUID,
        role: Role,
        org_membership_id: uuid.UUID,
    ) -> ProjectMembership: ...

    async def find_invitation(
        self, org_id: uuid.UUID, email: str
    ) -> Optional[MembershipInvitation]: ...

    async def create_invitation(
        self,
        org_id: uuid.UUID,
        email: str,
        org_role: Role,
        project_id: Optional[uuid.UUID] = None,
        project_role: Optional[Role] = None,
        invited_by_user_id: Optional[uuid.UUID] = None,
    ) -> MembershipInvitation: ...

    async def list_org_memberships(
        self, org_id: uuid.UUID
    ) -> Sequence[tuple[OrganizationMembership, User]]: ...


class SqlMembershipStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # --- Lookups ---

    async def find_organization(self, org_id: uuid.UUID) -> Optional[Organization]:
        return await self._session.get(Organization, org_id)

    async def find_project(
        self, project_id: uuid.UUID, org_id: uuid.UUID, exclude_deleted: bool = True
    ) -> Optional[Project]:
        stmt = select(Project).where(Project.id == project_id, Project.org_id == org_id)
        if exclude_deleted:
            stmt = stmt.where(Project.deleted_at.is_(None))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_user_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalars().first()

    async def find_user(self, user_id: uuid.UUID) -> Optional[User]:
        return await self._session.get(User, user_id)

    async def find_org_membership(
        self, org_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[OrganizationMembership]:
        result = await self._session.execute(
            select(OrganizationMembership).where(
                OrganizationMembership.org_id == org_id,
                OrganizationMembership.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def find_invitation(
        self, org_id: uuid.UUID, email: str
    ) -> Optional[MembershipInvitation]:
        result = await self._session.execute(
            select(MembershipInvitation).where(
                MembershipInvitation.org_id == org_id,
                MembershipInvitation.email == email.lower(),
            )
        )
        return result.scalar_one_or_none()

    async def list_org_memberships(
        self, org_id: uuid.UUID
    ) -> Sequence[tuple[OrganizationMembership, User]]:
        result = await self._session.execute(
            select(OrganizationMembership, User)
            .join(User, User.id == OrganizationMembership.user_id)
            .where(OrganizationMembership.org_id == org_id)
        )
        return [(membership, user) for membership, user in result.all()]

    # --- Writes ---

    async def _insert(self, row, table: str, key: dict):
        try:
            # Savepoint: a violation undoes this insert only, not earlier writes
            async with self._session.begin_nested():
                self._session.add(row)
                await self._session.flush()
        except IntegrityError:
            log.info("store.duplicate", table=table, **{k: str(v) for k, v in key.items()})
            raise DuplicateRecordError(table, key) from None
        return row

    async def create_org_membership(
        self, org_id: uuid.UUID, user_id: uuid.UUID, role: Role
    ) -> OrganizationMembership:
        membership = OrganizationMembership(
            org_id=org_id, user_id=user_id, role=_role_value(role)
        )
        return await self._insert(
            membership,
            OrganizationMembership.__tablename__,
            {"org_id": org_id, "user_id": user_id},
        )

    async def upsert_org_membership(
        self, org_id: uuid.UUID, user_id: uuid.UUID, role: Role
    ) -> OrganizationMembership:
        membership = await self.find_org_membership(org_id, user_id)
        if membership is None:
            try:
                return await self.create_org_membership(org_id, user_id, role)
            except DuplicateRecordError:
                # Lost an insert race; the row exists now, so update it
                membership = await self.find_org_membership(org_id, user_id)
                if membership is None:
                    raise

        membership.role = _role_value(role)
        self._session.add(membership)
        await self._session.flush()
        return membership

    async def delete_org_memberships(self, org_id: uuid.UUID, user_id: uuid.UUID) -> int:
        """Delete matching org memberships and the project memberships they authorize.

        Returns the number of org memberships removed (0 is not an error).
        """
        membership_ids = select(OrganizationMembership.id).where(
            OrganizationMembership.org_id == org_id,
            OrganizationMembership.user_id == user_id,
        )
        await self._session.execute(
            delete(ProjectMembership).where(
                ProjectMembership.org_membership_id.in_(membership_ids)
            )
        )
        result = await self._session.execute(
            delete(OrganizationMembership).where(
                OrganizationMembership.org_id == org_id,
                OrganizationMembership.user_id == user_id,
            )
        )
        return result.rowcount or 0

    async def create_project_membership(
        self,
        project_id: uuid.UUID,
        user_id: uuid.UUID,
        role: Role,
        org_membership_id: uuid.UUID,
    ) -> ProjectMembership:
        membership = ProjectMembership(
            project_id=project_id,
            user_id=user_id,
            role=_role_value(role),
            org_membership_id=org_membership_id,
        )
        return await self._insert(
            membership,
            ProjectMembership.__tablename__,
            {"project_id": project_id, "user_id": user_id},
        )

    async def create_invitation(
        self,
        org_id: uuid.UUID,
        email: str,
        org_role: Role,
        project_id: Optional[uuid.UUID] = None,
        project_role: Optional[Role] = None,
        invited_by_user_id: Optional[uuid.UUID] = None,
    ) -> MembershipInvitation:
        invitation = MembershipInvitation(
            org_id=org_id,
            email=email.lower(),
            org_role=_role_value(org_role),
            project_id=project_id,
            project_role=_role_value(project_role) if project_role is not None else None,
            invited_by_user_id=invited_by_user_id,
        )
        return await self._insert(
            invitation,
            MembershipInvitation.__tablename__,
            {"org_id": org_id, "email": email.lower()},
        )


async def get_membership_store(
    session: AsyncSession = Depends(get_session),
) -> MembershipStore:
    return SqlMembershipStore(session)
