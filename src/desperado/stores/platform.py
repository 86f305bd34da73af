"""Repository for the ``platform`` schema.

All writes go through the request-scoped session; callers decide when to
commit so that multi-step changes land in one transaction.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import Delete, Select, Update, delete, exists, select, update
from sqlalchemy.dialects.postgresql import Insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from desperado.db.models import (
    Feedback,
    FeedbackVote,
    Goal,
    Habit,
    HabitCheckIn,
    Household,
    HouseholdInvite,
    HouseholdMember,
    PartyGoal,
    User,
)
from desperado.exceptions import ConflictError

QUEUE_JOB_COLUMNS = (
    Feedback.id,
    Feedback.type,
    Feedback.body,
    Feedback.priority,
    Feedback.tags,
    Feedback.ai_classified_severity,
    Feedback.ai_extracted_feature,
    Feedback.created_at,
)


@dataclass(frozen=True)
class MembershipContext:
    household_id: uuid.UUID
    role: str
    user_id: uuid.UUID


@dataclass(frozen=True)
class InviteRecord:
    """A snapshot of one invite row, read under a row lock."""

    id: uuid.UUID
    household_id: uuid.UUID
    role: str
    max_uses: int
    times_used: int
    expires_at: datetime | None
    is_active: bool


def queued_feedback_query(limit: int) -> Select:
    """Worker queue: planned + queued, by priority (nulls last) then oldest first."""
    return (
        select(*QUEUE_JOB_COLUMNS)
        .where(Feedback.status == "planned", Feedback.pipeline_status == "queued")
        .order_by(Feedback.priority.asc().nulls_last(), Feedback.created_at.asc())
        .limit(limit)
    )


def locked_invite_query(code: str) -> Select:
    """Active invite by code, row-locked until the transaction ends."""
    return (
        select(HouseholdInvite)
        .where(HouseholdInvite.invite_code == code, HouseholdInvite.is_active.is_(True))
        .with_for_update()
    )


def invite_use_update(invite_id: uuid.UUID, expected_times_used: int, max_uses: int) -> Update:
    """Bump times_used only while it still equals the value read under lock."""
    new_count = expected_times_used + 1
    return (
        update(HouseholdInvite)
        .where(HouseholdInvite.id == invite_id, HouseholdInvite.times_used == expected_times_used)
        .values(times_used=new_count, is_active=new_count < max_uses)
    )


def vote_delete(feedback_id: uuid.UUID, user_id: uuid.UUID) -> Delete:
    return (
        delete(FeedbackVote)
        .where(FeedbackVote.feedback_id == feedback_id, FeedbackVote.user_id == user_id)
        .returning(FeedbackVote.id)
    )


def vote_insert(feedback_id: uuid.UUID, user_id: uuid.UUID) -> Insert:
    return (
        pg_insert(FeedbackVote)
        .values(feedback_id=feedback_id, user_id=user_id)
        .on_conflict_do_nothing(index_elements=[FeedbackVote.feedback_id, FeedbackVote.user_id])
    )


def party_goal_upsert(goal_id: uuid.UUID, party_xp_bonus: int) -> Insert:
    """One row per goal; a repeat call re-flags it and replaces the bonus."""
    stmt = pg_insert(PartyGoal).values(goal_id=goal_id, is_party_goal=True, party_xp_bonus=party_xp_bonus)
    return stmt.on_conflict_do_update(
        index_elements=[PartyGoal.goal_id],
        set_={"is_party_goal": True, "party_xp_bonus": stmt.excluded.party_xp_bonus},
    ).returning(PartyGoal.__table__)


class PlatformStore:
    """Typed queries over households, goals, habits, feedback and party goals."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    # --- Households ---

    async def get_membership(self, user_id: uuid.UUID) -> MembershipContext | None:
        result = await self.session.execute(
            select(HouseholdMember.household_id, HouseholdMember.role).where(HouseholdMember.user_id == user_id)
        )
        row = result.first()
        if row is None:
            return None
        return MembershipContext(household_id=row.household_id, role=row.role, user_id=user_id)

    async def get_household_name(self, household_id: uuid.UUID) -> str | None:
        result = await self.session.execute(select(Household.name).where(Household.id == household_id))
        return result.scalar_one_or_none()

    async def invite_code_exists(self, code: str) -> bool:
        result = await self.session.execute(select(exists().where(HouseholdInvite.invite_code == code)))
        return bool(result.scalar())

    async def create_invite(
        self,
        household_id: uuid.UUID,
        code: str,
        created_by: uuid.UUID,
        role: str,
        max_uses: int,
        expires_at: datetime,
    ) -> dict[str, Any]:
        result = await self.session.execute(
            pg_insert(HouseholdInvite)
            .values(
                household_id=household_id,
                invite_code=code,
                created_by=created_by,
                role=role,
                max_uses=max_uses,
                expires_at=expires_at,
            )
            .returning(HouseholdInvite.__table__)
        )
        row = dict(result.mappings().one())
        await self.session.commit()
        return row

    async def list_active_invites(self, household_id: uuid.UUID) -> list[dict[str, Any]]:
        result = await self.session.execute(
            select(HouseholdInvite.__table__)
            .where(HouseholdInvite.household_id == household_id, HouseholdInvite.is_active.is_(True))
            .order_by(HouseholdInvite.created_at.desc())
        )
        return [dict(row) for row in result.mappings()]

    async def lock_active_invite(self, code: str) -> InviteRecord | None:
        """Read an active invite by code with ``FOR UPDATE`` so concurrent redemptions serialize."""
        result = await self.session.execute(locked_invite_query(code))
        invite = result.scalar_one_or_none()
        if invite is None:
            return None
        return InviteRecord(
            id=invite.id,
            household_id=invite.household_id,
            role=invite.role,
            max_uses=invite.max_uses,
            times_used=invite.times_used,
            expires_at=invite.expires_at,
            is_active=invite.is_active,
        )

    async def deactivate_invite(self, invite_id: uuid.UUID) -> None:
        await self.session.execute(
            update(HouseholdInvite).where(HouseholdInvite.id == invite_id).values(is_active=False)
        )

    async def add_member(
        self,
        household_id: uuid.UUID,
        user_id: uuid.UUID,
        role: str,
        display_name: str | None,
    ) -> None:
        """Insert a membership. Raises ConflictError if the user already has one."""
        try:
            async with self.session.begin_nested():
                self.session.add(
                    HouseholdMember(
                        household_id=household_id,
                        user_id=user_id,
                        role=role,
                        display_name=display_name,
                    )
                )
        except IntegrityError as e:
            raise ConflictError("You already belong to a household") from e

    async def record_invite_use(self, invite_id: uuid.UUID, expected_times_used: int, max_uses: int) -> bool:
        """Advance times_used only if it still equals the snapshot value. Returns False on a lost race."""
        result = await self.session.execute(invite_use_update(invite_id, expected_times_used, max_uses))
        return result.rowcount == 1

    # --- Directory ---

    async def list_directory_users(self) -> list[dict[str, Any]]:
        result = await self.session.execute(select(User.id, User.full_name, User.email, User.avatar_url))
        return [dict(row) for row in result.mappings()]

    # --- Goals & habits ---

    async def list_goals(self, owner_id: uuid.UUID, statuses: list[str]) -> list[dict[str, Any]]:
        result = await self.session.execute(
            select(Goal.__table__)
            .where(Goal.owner_id == owner_id, Goal.status.in_(statuses), Goal.parent_goal_id.is_(None))
            .order_by(Goal.target_date.asc().nulls_last())
        )
        return [dict(row) for row in result.mappings()]

    async def goal_exists(self, goal_id: uuid.UUID) -> bool:
        result = await self.session.execute(select(exists().where(Goal.id == goal_id)))
        return bool(result.scalar())

    async def list_habits(self, owner_id: uuid.UUID, include_archived: bool = False) -> list[dict[str, Any]]:
        stmt = select(Habit.__table__).where(Habit.owner_id == owner_id)
        if not include_archived:
            stmt = stmt.where(Habit.archived.is_(False))
        result = await self.session.execute(stmt.order_by(Habit.created_at.desc()))
        return [dict(row) for row in result.mappings()]

    async def list_streak_candidates(self, frequency_ids: list[uuid.UUID]) -> list[dict[str, Any]]:
        """Unarchived habits on the given frequencies with a live streak."""
        if not frequency_ids:
            return []
        result = await self.session.execute(
            select(Habit.id, Habit.name, Habit.current_streak, Habit.owner_id, Habit.frequency_id).where(
                Habit.frequency_id.in_(frequency_ids),
                Habit.current_streak > 0,
                Habit.archived.is_(False),
            )
        )
        return [dict(row) for row in result.mappings()]

    async def habit_ids_checked_in_on(self, habit_ids: list[uuid.UUID], day: date) -> set[uuid.UUID]:
        if not habit_ids:
            return set()
        result = await self.session.execute(
            select(HabitCheckIn.habit_id).where(HabitCheckIn.habit_id.in_(habit_ids), HabitCheckIn.check_date == day)
        )
        return set(result.scalars())

    # --- Feedback ---

    async def get_feedback(self, feedback_id: uuid.UUID) -> dict[str, Any] | None:
        result = await self.session.execute(
            select(
                Feedback.id,
                Feedback.household_id,
                Feedback.type,
                Feedback.body,
                Feedback.status,
                Feedback.pipeline_status,
            ).where(Feedback.id == feedback_id)
        )
        row = result.mappings().first()
        return dict(row) if row else None

    async def toggle_vote(self, feedback_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Remove the vote if present, otherwise add it. Returns the resulting voted state.

        Delete-then-insert with ``ON CONFLICT DO NOTHING`` keeps the toggle safe under
        concurrent requests: the unique (feedback_id, user_id) key admits one row only.
        """
        deleted = await self.session.execute(vote_delete(feedback_id, user_id))
        if deleted.first() is not None:
            await self.session.commit()
            return False

        await self.session.execute(vote_insert(feedback_id, user_id))
        await self.session.commit()
        return True

    async def list_queued_feedback(self, limit: int) -> list[dict[str, Any]]:
        result = await self.session.execute(queued_feedback_query(limit))
        return [dict(row) for row in result.mappings()]

    async def update_feedback(self, feedback_id: uuid.UUID, fields: dict[str, Any]) -> dict[str, Any] | None:
        """Apply column updates and return the pipeline view of the row, or None if it does not exist."""
        values = {**fields, "updated_at": datetime.now(timezone.utc)}
        result = await self.session.execute(
            update(Feedback)
            .where(Feedback.id == feedback_id)
            .values(**values)
            .returning(
                Feedback.id,
                Feedback.type,
                Feedback.body,
                Feedback.status,
                Feedback.pipeline_status,
                Feedback.branch_name,
                Feedback.preview_url,
                Feedback.pr_number,
            )
        )
        row = result.mappings().first()
        await self.session.commit()
        return dict(row) if row else None

    # --- Party goals ---

    async def list_party_goals(self) -> list[dict[str, Any]]:
        result = await self.session.execute(
            select(
                PartyGoal.id,
                PartyGoal.goal_id,
                PartyGoal.party_xp_bonus,
                PartyGoal.created_at,
                Goal.title,
                Goal.description,
                Goal.status,
                Goal.progress_value,
                Goal.target_date,
                Goal.created_at.label("goal_created_at"),
            )
            .join(Goal, PartyGoal.goal_id == Goal.id)
            .where(PartyGoal.is_party_goal.is_(True))
            .order_by(PartyGoal.created_at.asc())
        )
        return [
            {
                "id": row.id,
                "goal_id": row.goal_id,
                "party_xp_bonus": row.party_xp_bonus,
                "created_at": row.created_at,
                "goal": {
                    "id": row.goal_id,
                    "title": row.title,
                    "description": row.description,
                    "status": row.status,
                    "progress_value": row.progress_value,
                    "target_date": row.target_date,
                    "created_at": row.goal_created_at,
                },
            }
            for row in result
        ]

    async def upsert_party_goal(self, goal_id: uuid.UUID, party_xp_bonus: int) -> dict[str, Any]:
        result = await self.session.execute(party_goal_upsert(goal_id, party_xp_bonus))
        row = dict(result.mappings().one())
        await self.session.commit()
        return row

    async def delete_party_goal(self, goal_id: uuid.UUID) -> None:
        await self.session.execute(delete(PartyGoal).where(PartyGoal.goal_id == goal_id))
        await self.session.commit()
