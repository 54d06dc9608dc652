"""
ChurchApp Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh SQLite database file (aiosqlite) with the full
       schema, a session for arranging data, and an HTTPX AsyncClient whose
       requests run against the same database.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── engine:          async engine on <tmp_path>/churchapp.db, schema created
    ├── session_factory: sessionmaker bound to that engine
    ├── db:              session used by tests to arrange and inspect rows
    ├── factory:         builders for users, churches, members, plans, admins
    └── client:          HTTPX AsyncClient with get_db_session overridden

Arranged rows are committed, so they are visible to the request sessions.
"""

import os
import tempfile
from typing import Iterable, Optional, Tuple

# Settings are read at import time; configure the environment first.
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["TEST_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["UPLOADS_ROOT"] = tempfile.mkdtemp(prefix="churchapp_test_")
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from churchapp.database import Base, enable_sqlite_foreign_keys, get_db_session
from churchapp.models import (
    SUBSCRIPTION_ACTIVE,
    AdminRole,
    AdminUser,
    Branch,
    Church,
    ChurchPosition,
    Member,
    Permission,
    Plan,
    Role,
    Subscription,
    User,
)
from churchapp.security import create_access_token, hash_password

DEFAULT_PASSWORD = "senha-forte-123"

# bcrypt is deliberately slow; hash once for every arranged account
DEFAULT_PASSWORD_HASH = hash_password(DEFAULT_PASSWORD)


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class Factory:
    """Builds committed rows for a test. Every builder returns the ORM object."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def _save(self, *objects):
        self.session.add_all(objects)
        await self.session.commit()
        return objects[0]

    async def user(self, email: Optional[str] = None, name: str = "Usuário Teste") -> User:
        n = self._next()
        return await self._save(User(
            name=name,
            email=email or f"user{n}@igreja.com",
            password_hash=DEFAULT_PASSWORD_HASH,
        ))

    async def church(
        self, owner: Optional[User] = None, name: str = "Igreja Central"
    ) -> Tuple[Church, Branch]:
        """A church with its main branch ("Sede")."""
        church = Church(name=name, created_by_user_id=owner.id if owner else None)
        self.session.add(church)
        await self.session.flush()
        branch = Branch(name="Sede", church_id=church.id, is_main_branch=True)
        await self._save(branch)
        return church, branch

    async def branch(self, church: Church, name: str = "Filial Norte") -> Branch:
        return await self._save(Branch(name=name, church_id=church.id, is_main_branch=False))

    async def member(
        self,
        branch: Branch,
        role: Role = Role.MEMBER,
        permissions: Iterable[str] = (),
        user: Optional[User] = None,
        with_user: bool = True,
        email: Optional[str] = None,
        name: Optional[str] = None,
        position: Optional[ChurchPosition] = None,
    ) -> Member:
        if user is None and with_user:
            user = await self.user(email=email)
        n = self._next()
        member = Member(
            name=name or f"Membro {n}",
            email=user.email if user else (email or f"member{n}@igreja.com"),
            role=role,
            branch_id=branch.id,
            user_id=user.id if user else None,
            position_id=position.id if position else None,
        )
        self.session.add(member)
        await self.session.flush()
        for t in permissions:
            self.session.add(Permission(member_id=member.id, type=t))
        await self.session.commit()
        return member

    async def position(self, church: Church, name: str, is_default: bool = False) -> ChurchPosition:
        return await self._save(
            ChurchPosition(name=name, church_id=church.id, is_default=is_default)
        )

    async def plan(
        self,
        name: str = "pro",
        max_members: Optional[int] = None,
        max_branches: Optional[int] = None,
        subscriber: Optional[User] = None,
        status: str = SUBSCRIPTION_ACTIVE,
    ) -> Plan:
        plan = Plan(name=name, max_members=max_members, max_branches=max_branches)
        self.session.add(plan)
        await self.session.flush()
        if subscriber is not None:
            self.session.add(Subscription(user_id=subscriber.id, plan_id=plan.id, status=status))
        await self.session.commit()
        return plan

    async def admin(
        self,
        role: AdminRole = AdminRole.SUPERADMIN,
        email: Optional[str] = None,
        is_active: bool = True,
    ) -> AdminUser:
        n = self._next()
        return await self._save(AdminUser(
            name=f"Operador {n}",
            email=email or f"admin{n}@churchapp.com",
            password_hash=DEFAULT_PASSWORD_HASH,
            admin_role=role,
            is_active=is_active,
        ))

    # ── Tokens ────────────────────────────────────────────────────────────

    async def member_token(self, member: Member) -> str:
        """Token with the same claims AuthService issues at login."""
        church_id = (
            await self.session.execute(select(Branch.church_id).where(Branch.id == member.branch_id))
        ).scalar_one()
        permissions = (
            await self.session.execute(
                select(Permission.type).where(Permission.member_id == member.id)
            )
        ).scalars().all()
        user = await self.session.get(User, member.user_id)
        return create_access_token({
            "sub": member.user_id,
            "email": user.email,
            "type": "member",
            "memberId": member.id,
            "role": member.role.value,
            "branchId": member.branch_id,
            "churchId": church_id,
            "permissions": sorted(permissions),
        })

    async def headers_for(self, member: Member) -> dict:
        return bearer(await self.member_token(member))

    def user_headers(self, user: User) -> dict:
        """A logged-in user with no member profile."""
        return bearer(create_access_token({
            "sub": user.id,
            "email": user.email,
            "type": "user",
            "memberId": None,
            "role": None,
            "branchId": None,
            "churchId": None,
            "permissions": [],
        }))

    def admin_headers(self, admin: AdminUser) -> dict:
        return bearer(create_access_token({
            "sub": admin.id,
            "adminUserId": admin.id,
            "adminRole": admin.admin_role.value,
            "email": admin.email,
            "type": "admin",
        }))


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'churchapp.db'}")
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def factory(db):
    return Factory(db)


# ══════════════════════════════════════════════════════════════════════════
# API Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def client(session_factory):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    get_db_session is replaced with one bound to the test database, keeping
    the commit-on-success / rollback-on-error contract.
    """
    from churchapp.main import app

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
