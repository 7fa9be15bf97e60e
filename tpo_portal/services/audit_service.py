"""
Audit Service - append-only trail of privileged actions.

Two operations:
1. record()      - write one event; never raises, a failed write only
                   reaches the operational log so it cannot abort the
                   action it accompanies
2. list_events() - filtered, newest-first, paginated read with a
                   denormalized actor summary; fails soft to []
"""

import json
import logging
from typing import Any, Dict, List, Optional

from tpo_portal.db.store import Store, new_id, utcnow

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


def record(
    store: Store,
    *,
    action: str,
    target_table: str,
    actor_id: Optional[str] = None,
    actor_role: Optional[str] = None,
    target_id: Optional[str] = None,
    target_role: Optional[str] = None,
    details: Any = None,
) -> None:
    """Append one audit event in its own transaction."""
    try:
        store.execute(
            """
            INSERT INTO audit_events (id, actor_id, actor_role, action, target_table,
                target_id, target_role, details, created_at)
            VALUES (:id, :actor_id, :actor_role, :action, :target_table,
                :target_id, :target_role, :details, :created_at)
            """,
            {
                "id": new_id(),
                "actor_id": actor_id or None,
                "actor_role": actor_role or None,
                "action": action,
                "target_table": target_table,
                "target_id": target_id or None,
                "target_role": target_role or None,
                "details": json.dumps(details, default=str) if details is not None else None,
                "created_at": utcnow(),
            }
        )
    except Exception:
        logger.exception(
            "Failed to insert audit event action=%s target=%s/%s", action, target_table, target_id
        )


def _decode_details(raw: Any) -> Any:
    if raw is None or not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Audit event has malformed details, returning raw text")
        return raw


def _approver_ids(events: List[Dict[str, Any]]) -> set:
    ids = set()
    for event in events:
        details = event.get("details")
        if not isinstance(details, dict):
            continue
        for side in ("new", "old"):
            snapshot = details.get(side)
            if isinstance(snapshot, dict) and snapshot.get("approved_by"):
                ids.add(str(snapshot["approved_by"]))
    return ids


def _attach_approvers(store: Store, events: List[Dict[str, Any]]) -> None:
    """Replace approved_by references in details snapshots with profile summaries."""
    ids = _approver_ids(events)
    if not ids:
        return

    placeholders = ", ".join(f":p{i}" for i in range(len(ids)))
    params = {f"p{i}": pid for i, pid in enumerate(sorted(ids))}
    try:
        approvers = store.fetch_all(
            f"SELECT id, full_name, email FROM profiles WHERE id IN ({placeholders})", params
        )
    except Exception:
        logger.exception("Failed to fetch approver profiles for audit events")
        return

    by_id = {a["id"]: a for a in approvers}
    for event in events:
        details = event.get("details")
        if not isinstance(details, dict):
            continue
        for side in ("new", "old"):
            snapshot = details.get(side)
            if isinstance(snapshot, dict) and snapshot.get("approved_by"):
                snapshot["approved_by_profile"] = by_id.get(str(snapshot["approved_by"]))


def list_events(
    store: Store,
    target_table: Optional[str] = None,
    target_id: Optional[str] = None,
    target_role: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """
    Read audit events matching every provided filter.

    Returns events newest first, each with an ``actor`` summary
    ({id, full_name, email}) or None. Returns [] on query failure.
    """
    if not limit or limit < 1:
        limit = DEFAULT_LIMIT
    if not offset or offset < 0:
        offset = 0

    sql = """
        SELECT e.id, e.actor_id, e.actor_role, e.action, e.target_table, e.target_id,
               e.target_role, e.details, e.created_at,
               p.id AS actor_profile_id, p.full_name AS actor_full_name, p.email AS actor_email
        FROM audit_events e
        LEFT JOIN profiles p ON e.actor_id = p.id
        WHERE 1 = 1
    """
    params: Dict[str, Any] = {"limit": limit, "offset": offset}

    if target_table:
        sql += " AND e.target_table = :target_table"
        params["target_table"] = target_table
    if target_id:
        sql += " AND e.target_id = :target_id"
        params["target_id"] = target_id
    if target_role:
        sql += " AND e.target_role = :target_role"
        params["target_role"] = target_role

    sql += " ORDER BY e.created_at DESC, e.seq DESC LIMIT :limit OFFSET :offset"

    try:
        rows = store.fetch_all(sql, params)
    except Exception:
        logger.exception("Failed to fetch audit events")
        return []

    events = []
    for r in rows:
        actor = None
        if r.pop("actor_profile_id"):
            actor = {"id": r["actor_id"], "full_name": r["actor_full_name"], "email": r["actor_email"]}
        r.pop("actor_full_name")
        r.pop("actor_email")
        r["details"] = _decode_details(r["details"])
        r["actor"] = actor
        events.append(r)

    _attach_approvers(store, events)
    return events
