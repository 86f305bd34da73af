"""Worker queue SQL tests: the ordering and page size are part of the statement."""

from sqlalchemy.dialects import postgresql

from desperado.stores.platform import queued_feedback_query


def _sql(limit: int = 5) -> str:
    return str(
        queued_feedback_query(limit).compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True})
    )


def test_filters_planned_and_queued():
    sql = _sql()
    assert "platform.feedback.status = 'planned'" in sql
    assert "platform.feedback.pipeline_status = 'queued'" in sql


def test_orders_priority_nulls_last_then_oldest_first():
    sql = _sql()
    order_by = sql.split("ORDER BY", 1)[1]
    assert "platform.feedback.priority ASC NULLS LAST" in order_by
    assert order_by.index("priority") < order_by.index("created_at")
    assert "platform.feedback.created_at ASC" in order_by


def test_limit_is_applied():
    assert _sql(5).rstrip().endswith("LIMIT 5")
