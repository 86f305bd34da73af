"""Compiled SQL for the statements that make redemption, voting and party-goal flags race-safe."""

import uuid

from sqlalchemy.dialects import postgresql

from desperado.stores.platform import (
    invite_use_update,
    locked_invite_query,
    party_goal_upsert,
    vote_delete,
    vote_insert,
)


def _compile(stmt):
    return stmt.compile(dialect=postgresql.dialect())


class TestInviteRedemptionStatements:
    def test_invite_read_takes_row_lock(self):
        sql = str(_compile(locked_invite_query("ABC234")))
        assert "platform.household_invites.invite_code = " in sql
        assert "platform.household_invites.is_active IS true" in sql
        assert sql.rstrip().endswith("FOR UPDATE")

    def test_usage_update_is_conditional_on_snapshot(self):
        compiled = _compile(invite_use_update(uuid.uuid4(), expected_times_used=2, max_uses=5))
        sql = str(compiled)
        assert sql.startswith("UPDATE platform.household_invites SET")
        assert "platform.household_invites.times_used = %(times_used_1)s" in sql.split("WHERE", 1)[1]
        assert compiled.params["times_used_1"] == 2
        assert compiled.params["times_used"] == 3
        assert compiled.params["is_active"] is True

    def test_final_use_deactivates(self):
        compiled = _compile(invite_use_update(uuid.uuid4(), expected_times_used=0, max_uses=1))
        assert compiled.params["times_used"] == 1
        assert compiled.params["is_active"] is False


class TestVoteToggleStatements:
    def test_delete_returns_removed_row(self):
        sql = str(_compile(vote_delete(uuid.uuid4(), uuid.uuid4())))
        assert sql.startswith("DELETE FROM platform.feedback_votes WHERE")
        assert "RETURNING platform.feedback_votes.id" in sql

    def test_insert_ignores_duplicate_vote(self):
        sql = str(_compile(vote_insert(uuid.uuid4(), uuid.uuid4())))
        assert sql.startswith("INSERT INTO platform.feedback_votes")
        assert "ON CONFLICT (feedback_id, user_id) DO NOTHING" in sql


class TestPartyGoalUpsert:
    def test_conflict_on_goal_updates_bonus(self):
        compiled = _compile(party_goal_upsert(uuid.uuid4(), 250))
        sql = str(compiled)
        assert "ON CONFLICT (goal_id) DO UPDATE SET" in sql
        assert "party_xp_bonus = excluded.party_xp_bonus" in sql
        assert "RETURNING" in sql
        assert compiled.params["party_xp_bonus"] == 250
