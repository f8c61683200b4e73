from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class AuditEntry:
    actor_id: int
    actor_role: str
    action: str
    resource: str
    resource_id: str
    details: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
