from typing import Optional, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from invoiceai.models.activity_log import ActivityLog
import json
import logging

logger = logging.getLogger(__name__)

ACTIVITY_LOG_LIMIT = 100


def validate_metadata(metadata: Optional[Dict]) -> Optional[str]:
    """
    Serialize the metadata payload.
    Raise ValueError if it is not JSON-serializable.
    """
    if metadata is None:
        return None
    try:
        return json.dumps(metadata)
    except TypeError as e:
        logger.error(f"Metadata validation failed. Non-serializable data: {metadata!r}")
        raise ValueError(f"Metadata must be JSON-serializable. Error: {e}") from e


async def log_activity(
    db: AsyncSession,
    tenant_id: str,
    user_id: Optional[str],
    action: str,
    entity_type: str,
    entity_id: Optional[str] = None,
    metadata: Optional[Dict] = None,
) -> ActivityLog:
    """
    Append an activity record to the caller's session.

    The record is flushed but not committed, so it lands in the same
    transaction as the state change it describes.
    """
    entry = ActivityLog(
        tenant_id=tenant_id,
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        metadata_=validate_metadata(metadata),
    )
    db.add(entry)
    await db.flush()
    logger.debug("Activity recorded: tenant=%s action=%s entity=%s:%s", tenant_id, action, entity_type, entity_id)
    return entry


def decode_metadata(entry: ActivityLog) -> Optional[Dict]:
    if not entry.metadata_:
        return None
    try:
        return json.loads(entry.metadata_)
    except json.JSONDecodeError:
        logger.warning(f"Activity log {entry.id} has non-JSON metadata")
        return None
