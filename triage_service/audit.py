"""
Decision Audit Log
==================

Stores one JSON entry per triage decision for later review.

Redis list when REDIS_URL is configured and reachable, bounded in-memory
list otherwise (dev / tests). Message text is not stored, except the first
100 characters of messages that triggered an emergency.
"""

import json
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import redis

from .models import TriageDecision

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 100


class DecisionLog:

    KEY = "triage:decisions"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        max_entries: int = 1000,
        client: Optional[redis.Redis] = None,
    ):
        self.max_entries = max_entries
        self._memory: deque = deque(maxlen=max_entries)
        self._redis = client

        if self._redis is None and redis_url:
            try:
                candidate = redis.Redis.from_url(redis_url, decode_responses=True)
                candidate.ping()
                self._redis = candidate
                logger.info("Decision audit log using Redis")
            except redis.exceptions.RedisError as e:
                logger.warning(f"Redis unavailable ({e}), using in-memory audit log")

    @property
    def uses_redis(self) -> bool:
        return self._redis is not None

    def record(
        self,
        decision: TriageDecision,
        source: str,
        message: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Append an audit entry and return it."""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": source,
            "decision": decision.to_dict(),
        }
        if decision.emergency_detected:
            if message:
                entry["message_excerpt"] = message[:EXCERPT_LENGTH]
            logger.warning(
                f"Emergency decision recorded: keywords={list(decision.matched_emergency_keywords)} source={source}"
            )

        if self._redis is not None:
            try:
                pipe = self._redis.pipeline()
                pipe.lpush(self.KEY, json.dumps(entry, ensure_ascii=False))
                pipe.ltrim(self.KEY, 0, self.max_entries - 1)
                pipe.execute()
                return entry
            except redis.exceptions.RedisError as e:
                logger.warning(f"Redis write failed ({e}), keeping audit entry in memory")

        self._memory.appendleft(entry)
        return entry

    def recent(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Most recent entries first; a limit below 1 returns nothing."""
        if limit < 1:
            return []
        if self._redis is not None:
            try:
                return [json.loads(raw) for raw in self._redis.lrange(self.KEY, 0, limit - 1)]
            except redis.exceptions.RedisError as e:
                logger.warning(f"Redis read failed ({e}), returning in-memory entries")
        return list(self._memory)[:limit]
