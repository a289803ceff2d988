"""Reproducible reflection identifiers derived from bucket keys."""

from __future__ import annotations

import hashlib
import uuid

SEED_PREFIX = "reflection-"


def stable_id_from_seed(seed: str) -> uuid.UUID:
    """Interpret the first 16 bytes of sha256(seed) as a UUID."""

    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return uuid.UUID(bytes=digest[:16])


def stable_reflection_id(bucket_key: str) -> uuid.UUID:
    """Same bucket key, same id, across every recomputation."""

    return stable_id_from_seed(f"{SEED_PREFIX}{bucket_key}")
