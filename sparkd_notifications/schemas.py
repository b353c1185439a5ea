from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class OrderStatus(str, Enum):
    """Order statuses that produce a notification when entered."""
    PENDING_PAYMENT = "pendingPayment"
    IN_PROGRESS = "inProgress"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class NotificationKind(str, Enum):
    ORDER_STATUS_CHANGE = "order_status_change"
    ORDER_CANCELLED = "order_cancelled"


class Order(BaseModel):
    """Snapshot of an `orders/{orderId}` document. Owned by the order service."""
    model_config = ConfigDict(extra="ignore")

    status: Optional[str] = None
    smeID: Optional[str] = None
    sparkID: Optional[str] = None
    gigTitle: Optional[str] = ""


class User(BaseModel):
    """The part of a `users/{userId}` document this service reads."""
    model_config = ConfigDict(extra="ignore")

    fcmToken: Optional[str] = None


class Notification(BaseModel):
    """A `notifications/{id}` document as stored in Firestore."""
    model_config = ConfigDict(extra="ignore")

    userId: str
    title: str
    body: str
    data: Optional[Dict[str, Any]] = None
    read: bool = False
    createdAt: Optional[datetime] = None


class NotificationDraft(BaseModel):
    """A notification decided on but not yet written."""
    userId: Optional[str] = None
    title: str
    body: str
    data: Dict[str, str] = Field(default_factory=dict)
