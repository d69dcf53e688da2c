"""
Local/remote coupon reconciliation.

The database is authoritative for *whether* a coupon was claimed. A
short-lived local cache keeps the claim timestamps this deployment
wrote, so a countdown survives a reload even while the remote row lags
behind. When both sides are read, a complete local timestamp pair takes
precedence; otherwise the status is derived from the remote record.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from typing import Dict, Iterable, List, Optional

from django.conf import settings
from django.core.cache import caches
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.coupons.models import CouponStatus

from .countdown import remaining_seconds
from .coupon_keys import has_claim_timestamps

logger = logging.getLogger(__name__)


def _parse_timestamp(value) -> Optional[datetime]:
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value
    parsed = parse_datetime(str(value))
    if parsed is not None and timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


@dataclass(frozen=True)
class RemoteCouponRecord:
    """
    A coupon as the authoritative store reports it.

    Availability is a boolean (``True`` = unclaimed); anything richer is
    derived from the timestamps.
    """

    unique_id: str
    is_available: bool
    claimed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_used: bool = False

    @classmethod
    def from_coupon(cls, coupon) -> 'RemoteCouponRecord':
        return cls(
            unique_id=coupon.unique_id,
            is_available=coupon.status == CouponStatus.AVAILABLE,
            claimed_at=coupon.claimed_at,
            expires_at=coupon.expires_at,
            is_used=coupon.status == CouponStatus.USED,
        )

    @classmethod
    def from_row(cls, row: dict) -> 'RemoteCouponRecord':
        """
        Adapt a hosted-backend row.

        Expects ``unique_id`` and a boolean ``status`` (``True`` means
        available); ``claimed_at``, ``expires_at`` and ``used`` are optional.
        """
        return cls(
            unique_id=row['unique_id'],
            is_available=bool(row['status']),
            claimed_at=_parse_timestamp(row.get('claimed_at')),
            expires_at=_parse_timestamp(row.get('expires_at')),
            is_used=bool(row.get('used', False)),
        )


@dataclass(frozen=True)
class LocalCouponEntry:
    unique_id: str
    claimed_at: datetime
    expires_at: datetime

    def to_dict(self) -> dict:
        return {
            'unique_id': self.unique_id,
            'claimed_at': self.claimed_at.isoformat(),
            'expires_at': self.expires_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Optional['LocalCouponEntry']:
        claimed_at = _parse_timestamp(data.get('claimed_at'))
        expires_at = _parse_timestamp(data.get('expires_at'))
        if not has_claim_timestamps(claimed_at, expires_at):
            return None
        return cls(unique_id=data['unique_id'], claimed_at=claimed_at, expires_at=expires_at)


@dataclass(frozen=True)
class CouponView:
    """Effective coupon state after reconciliation."""

    unique_id: str
    status: str
    claimed_at: Optional[datetime]
    expires_at: Optional[datetime]
    source: str

    def remaining_seconds(self, now: Optional[datetime] = None) -> int:
        if self.status != CouponStatus.ACTIVE:
            return 0
        return remaining_seconds(self.expires_at, now)


def _status_from_timestamps(expires_at: datetime, now: datetime) -> str:
    return CouponStatus.USED if now >= expires_at else CouponStatus.ACTIVE


def merge_coupon_view(
    remote: RemoteCouponRecord,
    local: Optional[LocalCouponEntry],
    now: Optional[datetime] = None
) -> CouponView:
    """
    Combine the remote record with the local cache entry.

    A complete local timestamp pair wins. Without one, the remote flag
    decides: available stays available, otherwise the remote timestamps
    give active or used (used when there are none).
    """
    now = now or timezone.now()

    if local is not None:
        return CouponView(
            unique_id=remote.unique_id,
            status=_status_from_timestamps(local.expires_at, now),
            claimed_at=local.claimed_at,
            expires_at=local.expires_at,
            source='local',
        )

    if remote.is_available:
        return CouponView(
            unique_id=remote.unique_id,
            status=CouponStatus.AVAILABLE,
            claimed_at=None,
            expires_at=None,
            source='remote',
        )

    if remote.is_used or not has_claim_timestamps(remote.claimed_at, remote.expires_at):
        status = CouponStatus.USED
    else:
        status = _status_from_timestamps(remote.expires_at, now)

    return CouponView(
        unique_id=remote.unique_id,
        status=status,
        claimed_at=remote.claimed_at,
        expires_at=remote.expires_at,
        source='remote',
    )


class CouponReconciler:
    """Reads and writes the local coupon cache and merges it with remote records."""

    key_prefix = 'meal_pass:coupon:'

    def __init__(self, cache=None, timeout: Optional[int] = None):
        conf = settings.MEAL_PASS
        self.cache = cache if cache is not None else caches[conf['COUPON_CACHE_ALIAS']]
        self.timeout = timeout if timeout is not None else conf['COUPON_CACHE_TIMEOUT']

    def _key(self, unique_id: str) -> str:
        return f"{self.key_prefix}{unique_id}"

    def get_local(self, unique_id: str) -> Optional[LocalCouponEntry]:
        data = self.cache.get(self._key(unique_id))
        if not data:
            return None
        return LocalCouponEntry.from_dict(data)

    def get_local_many(self, unique_ids: Iterable[str]) -> Dict[str, LocalCouponEntry]:
        keys = {self._key(uid): uid for uid in unique_ids}
        found = self.cache.get_many(list(keys))
        entries = {}
        for key, data in found.items():
            entry = LocalCouponEntry.from_dict(data)
            if entry is not None:
                entries[keys[key]] = entry
        return entries

    def record_local_claim(self, unique_id: str, claimed_at: datetime, expires_at: datetime) -> None:
        entry = LocalCouponEntry(unique_id=unique_id, claimed_at=claimed_at, expires_at=expires_at)
        self.cache.set(self._key(unique_id), entry.to_dict(), self.timeout)

    def discard(self, unique_id: str) -> None:
        self.cache.delete(self._key(unique_id))

    def sync(self, record: RemoteCouponRecord) -> None:
        """Overwrite the local entry with a confirmed remote state."""
        if record.is_available or not has_claim_timestamps(record.claimed_at, record.expires_at):
            self.discard(record.unique_id)
            return
        self.record_local_claim(record.unique_id, record.claimed_at, record.expires_at)

    def effective_view(self, record: RemoteCouponRecord, now: Optional[datetime] = None) -> CouponView:
        return merge_coupon_view(record, self.get_local(record.unique_id), now)

    def refresh(
        self,
        records: Iterable[RemoteCouponRecord],
        now: Optional[datetime] = None
    ) -> List[CouponView]:
        """
        Merge a batch of remote records with the cache and write the
        claimed ones back.
        """
        now = now or timezone.now()
        records = list(records)
        local = self.get_local_many(r.unique_id for r in records)

        views = []
        write_back = {}
        for record in records:
            view = merge_coupon_view(record, local.get(record.unique_id), now)
            views.append(view)
            if has_claim_timestamps(view.claimed_at, view.expires_at):
                entry = LocalCouponEntry(view.unique_id, view.claimed_at, view.expires_at)
                write_back[self._key(view.unique_id)] = entry.to_dict()

        if write_back:
            self.cache.set_many(write_back, self.timeout)

        logger.debug(
            "Reconciled %d coupons (%d from local cache)",
            len(views), sum(1 for v in views if v.source == 'local')
        )
        return views
