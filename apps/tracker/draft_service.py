"""
Autosaved drafts of in-progress job application edits.

Each user has one draft index in the Django cache:

    drafts:<user_id> -> {"<application_id>": {"data": {...}, "saved_at": <epoch seconds>}}

Entries expire DRAFT_TTL_SECONDS after their last save. The cache key itself
carries the same TTL, refreshed on every write, and expired entries are
pruned whenever the index is read. A registry key lists the users that
currently hold drafts so the scheduled purge can find them.

There is no merging with server-side changes: committing a draft applies it
over whatever the application holds now.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Dict, Optional
from uuid import UUID

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

INDEX_KEY = "drafts:{user_id}"
REGISTRY_KEY = "drafts:users"


def _ttl() -> int:
    return settings.DRAFT_TTL_SECONDS


def _index_key(user_id) -> str:
    return INDEX_KEY.format(user_id=user_id)


def _valid_entry(entry) -> bool:
    if not isinstance(entry, dict) or not isinstance(entry.get('data'), dict):
        return False
    saved_at = entry.get('saved_at')
    return isinstance(saved_at, (int, float)) and not isinstance(saved_at, bool)


def _read_index(user_id) -> Dict[str, dict]:
    """Raw index; a corrupt value is discarded and treated as empty."""
    raw = cache.get(_index_key(user_id))
    if raw is None:
        return {}
    if not isinstance(raw, dict) or not all(_valid_entry(v) for v in raw.values()):
        logger.warning("Discarding corrupt draft index for user %s", user_id)
        cache.delete(_index_key(user_id))
        return {}
    return raw


def _write_index(user_id, drafts: Dict[str, dict]):
    key = _index_key(user_id)
    registry = set(cache.get(REGISTRY_KEY) or [])
    if drafts:
        cache.set(key, drafts, timeout=_ttl())
        registry.add(str(user_id))
    else:
        cache.delete(key)
        registry.discard(str(user_id))
    cache.set(REGISTRY_KEY, sorted(registry), timeout=None)


def _prune(drafts: Dict[str, dict], now: float) -> Dict[str, dict]:
    ttl = _ttl()
    return {app_id: d for app_id, d in drafts.items() if now - d['saved_at'] < ttl}


def _as_dict(application_id: str, draft: dict) -> dict:
    return {
        "application_id": application_id,
        "data": draft['data'],
        "saved_at": datetime.fromtimestamp(draft["saved_at"], tz=timezone.utc),
        "expires_at": datetime.fromtimestamp(draft["saved_at"] + _ttl(), tz=timezone.utc),
    }


def save_draft(user_id, application_id: UUID, data: dict) -> Optional[dict]:
    """
    Merge a partial edit into the stored draft and refresh its timestamp.
    Empty updates are ignored.
    """
    if not data:
        return get_draft(user_id, application_id)

    now = time.time()
    drafts = _prune(_read_index(user_id), now)
    key = str(application_id)
    merged = dict(drafts.get(key, {}).get('data', {}))
    merged.update(data)
    drafts[key] = {"data": merged, "saved_at": now}
    _write_index(user_id, drafts)
    return _as_dict(key, drafts[key])


def load_drafts(user_id) -> list:
    """All unexpired drafts of the user; expired ones are dropped from the index."""
    raw = _read_index(user_id)
    drafts = _prune(raw, time.time())
    if len(drafts) != len(raw):
        _write_index(user_id, drafts)
    return [_as_dict(app_id, d) for app_id, d in sorted(drafts.items(), key=lambda kv: -kv[1]['saved_at'])]


def get_draft(user_id, application_id: UUID) -> Optional[dict]:
    key = str(application_id)
    for draft in load_drafts(user_id):
        if draft['application_id'] == key:
            return draft
    return None


def clear_draft(user_id, application_id: UUID) -> bool:
    """Remove one draft. The index disappears once it holds no drafts."""
    drafts = _read_index(user_id)
    if drafts.pop(str(application_id), None) is None:
        return False
    _write_index(user_id, drafts)
    return True


def purge_expired_drafts() -> int:
    """Prune every registered index. Returns the number of drafts removed."""
    removed = 0
    now = time.time()
    for user_id in list(cache.get(REGISTRY_KEY) or []):
        raw = _read_index(user_id)
        drafts = _prune(raw, now)
        removed += len(raw) - len(drafts)
        _write_index(user_id, drafts)
    if removed:
        logger.info("Purged %d expired application draft(s)", removed)
    return removed
