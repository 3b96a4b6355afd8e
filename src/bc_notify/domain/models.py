"""Notification domain models — pure dataclasses."""

from dataclasses import dataclass, field
from typing import Any

from src.bc_common.enums import NotificationType


@dataclass(frozen=True)
class NotificationEvent:
    """'Event happened, notify these members' request handed to the sink."""

    type: NotificationType
    member_ids: tuple[str, ...]
    payload: dict[str, Any] = field(default_factory=dict)

    def to_message(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "member_ids": list(self.member_ids),
            "payload": self.payload,
        }
