"""
Tests for organizations and memberships.

Tests cover:
- Founding an org (atomic org + admin membership)
- Primary organization ordering
- Member listing and removal permissions
- Organization endpoints
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import func
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from plantrack.core.database import get_session_context
from plantrack.core.errors import AccessDenied, NotFound, OperationFailed, ValidationFailed
from plantrack.models.base import utcnow
from plantrack.models.membership import Membership
from plantrack.models.organization import Organization
from plantrack.models.user import User
from plantrack.services import organizations as org_service
from plantrack_shared.schemas.common import Role


async def _user(session, email: str) -> User:
    user = User(email=email, password_hash="x", name=email.split("@")[0])
    session.add(user)
    await session.flush()
    return user


# ---------------------------------------------------------------------------
# Service: Membership store
# ---------------------------------------------------------------------------

class TestCreateOrganization:
    @pytest.mark.asyncio
    async def test_founder_becomes_sole_admin(self, session):
        user = await _user(session, "founder@example.com")
        org = await org_service.create_organization(session, "Acme", user.id)

        assert await org_service.get_primary_organization(session, user.id) == org.id
        rows = await org_service.get_user_organizations(session, user.id)
        assert len(rows) == 1
        found, role, _joined = rows[0]
        assert found.id == org.id
        assert found.name == "Acme"
        assert role == Role.ADMIN

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, session):
        user = await _user(session, "blank@example.com")
        with pytest.raises(ValidationFailed):
            await org_service.create_organization(session, "   ", user.id)

    @pytest.mark.asyncio
    async def test_store_failure_rolls_back_both_rows(self, session_factory):
        async with get_session_context(session_factory) as session:
            user = await _user(session, "fail@example.com")
            user_id = user.id

        with pytest.raises(OperationFailed):
            async with get_session_context(session_factory) as session:
                real_flush = session.flush
                calls = {"n": 0}

                async def flaky_flush(*args, **kwargs):
                    calls["n"] += 1
                    if calls["n"] == 2:
                        raise OperationalError("INSERT", {}, Exception("disk full"))
                    return await real_flush(*args, **kwargs)

                with patch.object(session, "flush", flaky_flush):
                    await org_service.create_organization(session, "Doomed", user_id)

        async with get_session_context(session_factory) as session:
            orgs = (await session.execute(select(func.count()).select_from(Organization))).scalar_one()
            memberships = (
                await session.execute(select(func.count()).select_from(Membership))
            ).scalar_one()
            assert orgs == 0
            assert memberships == 0


class TestPrimaryOrganization:
    @pytest.mark.asyncio
    async def test_none_without_membership(self, session):
        user = await _user(session, "nobody@example.com")
        assert await org_service.get_primary_organization(session, user.id) is None
        assert await org_service.get_user_organizations(session, user.id) == []

    @pytest.mark.asyncio
    async def test_oldest_membership_wins(self, session):
        user = await _user(session, "multi@example.com")
        first = await org_service.create_organization(session, "First", user.id)

        other = await _user(session, "other@example.com")
        second = await org_service.create_organization(session, "Second", other.id)
        session.add(Membership(organization_id=second.id, user_id=user.id, role=Role.MEMBER))
        await session.flush()

        assert await org_service.get_primary_organization(session, user.id) == first.id
        names = [o.name for o, _, _ in await org_service.get_user_organizations(session, user.id)]
        assert names == ["First", "Second"]

    @pytest.mark.asyncio
    async def test_joined_at_beats_insertion_order(self, session):
        user = await _user(session, "backdated@example.com")
        owner = await _user(session, "owner@example.com")
        newer = await org_service.create_organization(session, "Newer", owner.id)
        older = await org_service.create_organization(session, "Older", owner.id)

        session.add(Membership(organization_id=newer.id, user_id=user.id, role=Role.MEMBER))
        session.add(
            Membership(
                organization_id=older.id,
                user_id=user.id,
                role=Role.MEMBER,
                joined_at=utcnow() - timedelta(days=30),
            )
        )
        await session.flush()

        assert await org_service.get_primary_organization(session, user.id) == older.id

    @pytest.mark.asyncio
    async def test_ties_broken_by_insertion_order(self, session):
        user = await _user(session, "tie@example.com")
        owner = await _user(session, "tieowner@example.com")
        a = await org_service.create_organization(session, "A", owner.id)
        b = await org_service.create_organization(session, "B", owner.id)

        same_instant = utcnow() - timedelta(days=1)
        session.add(Membership(organization_id=b.id, user_id=user.id, joined_at=same_instant))
        await session.flush()
        session.add(Membership(organization_id=a.id, user_id=user.id, joined_at=same_instant))
        await session.flush()

        assert await org_service.get_primary_organization(session, user.id) == b.id


class TestMembers:
    @pytest.mark.asyncio
    async def test_members_listed_for_member(self, session):
        admin = await _user(session, "admin@example.com")
        org = await org_service.create_organization(session, "Acme", admin.id)
        member = await _user(session, "member@example.com")
        session.add(Membership(organization_id=org.id, user_id=member.id))
        await session.flush()

        members = await org_service.get_members(session, org.id, member.id)
        assert [m["email"] for m in members] == ["admin@example.com", "member@example.com"]
        assert [m["role"] for m in members] == [Role.ADMIN, Role.MEMBER]

    @pytest.mark.asyncio
    async def test_non_member_denied(self, session):
        admin = await _user(session, "admin2@example.com")
        org = await org_service.create_organization(session, "Acme", admin.id)
        outsider = await _user(session, "outsider@example.com")

        with pytest.raises(AccessDenied):
            await org_service.get_members(session, org.id, outsider.id)

    @pytest.mark.asyncio
    async def test_admin_removes_member(self, session):
        admin = await _user(session, "boss@example.com")
        org = await org_service.create_organization(session, "Acme", admin.id)
        member = await _user(session, "leaving@example.com")
        session.add(Membership(organization_id=org.id, user_id=member.id))
        await session.flush()

        await org_service.remove_member(session, org.id, member.id, admin.id)
        assert await org_service.get_membership(session, org.id, member.id) is None
        assert await org_service.get_primary_organization(session, member.id) is None

    @pytest.mark.asyncio
    async def test_member_cannot_remove(self, session):
        admin = await _user(session, "boss2@example.com")
        org = await org_service.create_organization(session, "Acme", admin.id)
        member = await _user(session, "peon@example.com")
        session.add(Membership(organization_id=org.id, user_id=member.id))
        await session.flush()

        with pytest.raises(AccessDenied):
            await org_service.remove_member(session, org.id, admin.id, member.id)

    @pytest.mark.asyncio
    async def test_admin_cannot_remove_self(self, session):
        admin = await _user(session, "self@example.com")
        org = await org_service.create_organization(session, "Acme", admin.id)
        with pytest.raises(ValidationFailed):
            await org_service.remove_member(session, org.id, admin.id, admin.id)

    @pytest.mark.asyncio
    async def test_remove_unknown_member(self, session):
        admin = await _user(session, "boss3@example.com")
        org = await org_service.create_organization(session, "Acme", admin.id)
        with pytest.raises(NotFound):
            await org_service.remove_member(session, org.id, uuid.uuid4(), admin.id)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

class TestOrganizationEndpoints:
    @pytest.mark.asyncio
    async def test_list_after_register(self, client, register, auth_headers):
        data = await register("list@example.com", organization_name="Acme")
        resp = await client.get("/api/organizations", headers=auth_headers(data["token"]))
        assert resp.status_code == 200
        body = resp.json()
        assert len(body) == 1
        assert body[0]["id"] == data["organizationId"]
        assert body[0]["role"] == "admin"

    @pytest.mark.asyncio
    async def test_create_second_org_keeps_primary(self, client, register, auth_headers):
        data = await register("second@example.com", organization_name="First")
        headers = auth_headers(data["token"])

        resp = await client.post("/api/organizations", json={"name": "Second"}, headers=headers)
        assert resp.status_code == 201
        assert resp.json()["name"] == "Second"

        me = await client.get("/auth/me", headers=headers)
        assert me.json()["org_id"] == data["organizationId"]

    @pytest.mark.asyncio
    async def test_members_denied_for_outsider(self, client, register, auth_headers):
        acme = await register("a@example.com", organization_name="Acme")
        other = await register("b@example.com", organization_name="Other")

        resp = await client.get(
            f"/api/organizations/{acme['organizationId']}/members",
            headers=auth_headers(other["token"]),
        )
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "ACCESS_DENIED"

    @pytest.mark.asyncio
    async def test_remove_member_endpoint(self, client, register, auth_headers):
        admin = await register("admin@acme.com", organization_name="Acme")
        invite = await client.post(
            f"/api/organizations/{admin['organizationId']}/invite",
            json={"email": "member@acme.com"},
            headers=auth_headers(admin["token"]),
        )
        member = await register("member@acme.com", invite_token=invite.json()["inviteToken"])

        resp = await client.delete(
            f"/api/organizations/{admin['organizationId']}/members/{member['user']['id']}",
            headers=auth_headers(admin["token"]),
        )
        assert resp.status_code == 200

        members = await client.get(
            f"/api/organizations/{admin['organizationId']}/members",
            headers=auth_headers(admin["token"]),
        )
        assert [m["email"] for m in members.json()] == ["admin@acme.com"]

    @pytest.mark.asyncio
    async def test_requires_credential(self, client):
        resp = await client.get("/api/organizations")
        assert resp.status_code == 401
