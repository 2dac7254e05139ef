"""
Data models for the Service Bus resources the sample provisions.

The management SDK returns its own model objects; these snapshots copy the
fields the sample reports on so the rest of the package never depends on
SDK types directly.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resource_group_from_id(resource_id: Optional[str]) -> Optional[str]:
    """Extract the resource group name from an ARM resource id."""
    if not resource_id:
        return None
    parts = resource_id.strip("/").split("/")
    for index, part in enumerate(parts[:-1]):
        if part.lower() == "resourcegroups":
            return parts[index + 1]
    return None


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class ResourceKind(str, Enum):
    """Kinds of resources the workflow creates."""

    RESOURCE_GROUP = "resource_group"
    NAMESPACE = "namespace"
    TOPIC = "topic"
    SUBSCRIPTION = "subscription"
    AUTHORIZATION_RULE = "authorization_rule"


class NamespaceSkuName(str, Enum):
    """Service Bus namespace pricing tiers."""

    BASIC = "Basic"
    STANDARD = "Standard"
    PREMIUM = "Premium"


class AccessRight(str, Enum):
    """Claims an authorization rule can grant."""

    MANAGE = "Manage"
    SEND = "Send"
    LISTEN = "Listen"


class KeyType(str, Enum):
    """Which key of an authorization rule to regenerate."""

    PRIMARY = "PrimaryKey"
    SECONDARY = "SecondaryKey"


class StepStatus(str, Enum):
    """Workflow step status."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class ResourceHandle(BaseModel):
    """Identifies a resource created during a workflow run."""

    kind: ResourceKind
    name: str
    resource_id: Optional[str] = None
    parent: Optional[str] = None


class MessageCounts(BaseModel):
    """Message counters reported for a topic or subscription."""

    active_message_count: Optional[int] = None
    dead_letter_message_count: Optional[int] = None
    scheduled_message_count: Optional[int] = None
    transfer_message_count: Optional[int] = None
    transfer_dead_letter_message_count: Optional[int] = None

    @classmethod
    def from_sdk(cls, details: Any) -> "MessageCounts":
        if details is None:
            return cls()
        return cls(
            active_message_count=getattr(details, "active_message_count", None),
            dead_letter_message_count=getattr(details, "dead_letter_message_count", None),
            scheduled_message_count=getattr(details, "scheduled_message_count", None),
            transfer_message_count=getattr(details, "transfer_message_count", None),
            transfer_dead_letter_message_count=getattr(details, "transfer_dead_letter_message_count", None),
        )


class NamespaceSummary(BaseModel):
    """Snapshot of a Service Bus namespace."""

    id: Optional[str] = None
    name: str
    location: Optional[str] = None
    resource_group: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    service_bus_endpoint: Optional[str] = None
    provisioning_state: Optional[str] = None
    sku_name: Optional[str] = None
    sku_tier: Optional[str] = None
    sku_capacity: Optional[int] = None

    @property
    def fqdn(self) -> Optional[str]:
        """Host name of the namespace endpoint."""
        if not self.service_bus_endpoint:
            return None
        host = self.service_bus_endpoint.split("://", 1)[-1]
        return host.split(":", 1)[0].rstrip("/")

    @property
    def dns_label(self) -> Optional[str]:
        fqdn = self.fqdn
        return fqdn.split(".", 1)[0] if fqdn else None

    @classmethod
    def from_sdk(cls, namespace: Any) -> "NamespaceSummary":
        sku = getattr(namespace, "sku", None)
        return cls(
            id=namespace.id,
            name=namespace.name,
            location=getattr(namespace, "location", None),
            resource_group=resource_group_from_id(namespace.id),
            created_at=getattr(namespace, "created_at", None),
            updated_at=getattr(namespace, "updated_at", None),
            service_bus_endpoint=getattr(namespace, "service_bus_endpoint", None),
            provisioning_state=getattr(namespace, "provisioning_state", None),
            sku_name=_enum_value(getattr(sku, "name", None)),
            sku_tier=_enum_value(getattr(sku, "tier", None)),
            sku_capacity=getattr(sku, "capacity", None),
        )


class TopicSummary(BaseModel):
    """Snapshot of a Service Bus topic."""

    id: Optional[str] = None
    name: str
    resource_group: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    accessed_at: Optional[datetime] = None
    counts: MessageCounts = Field(default_factory=MessageCounts)
    size_in_bytes: Optional[int] = None
    max_size_in_megabytes: Optional[int] = None
    default_message_time_to_live: Optional[timedelta] = None
    duplicate_detection_history_time_window: Optional[timedelta] = None
    auto_delete_on_idle: Optional[timedelta] = None
    enable_batched_operations: Optional[bool] = None
    requires_duplicate_detection: Optional[bool] = None
    enable_express: Optional[bool] = None
    enable_partitioning: Optional[bool] = None
    status: Optional[str] = None
    subscription_count: Optional[int] = None

    @classmethod
    def from_sdk(cls, topic: Any) -> "TopicSummary":
        return cls(
            id=topic.id,
            name=topic.name,
            resource_group=resource_group_from_id(topic.id),
            created_at=getattr(topic, "created_at", None),
            updated_at=getattr(topic, "updated_at", None),
            accessed_at=getattr(topic, "accessed_at", None),
            counts=MessageCounts.from_sdk(getattr(topic, "count_details", None)),
            size_in_bytes=getattr(topic, "size_in_bytes", None),
            max_size_in_megabytes=getattr(topic, "max_size_in_megabytes", None),
            default_message_time_to_live=getattr(topic, "default_message_time_to_live", None),
            duplicate_detection_history_time_window=getattr(topic, "duplicate_detection_history_time_window", None),
            auto_delete_on_idle=getattr(topic, "auto_delete_on_idle", None),
            enable_batched_operations=getattr(topic, "enable_batched_operations", None),
            requires_duplicate_detection=getattr(topic, "requires_duplicate_detection", None),
            enable_express=getattr(topic, "enable_express", None),
            enable_partitioning=getattr(topic, "enable_partitioning", None),
            status=_enum_value(getattr(topic, "status", None)),
            subscription_count=getattr(topic, "subscription_count", None),
        )


class SubscriptionSummary(BaseModel):
    """Snapshot of a Service Bus topic subscription."""

    id: Optional[str] = None
    name: str
    resource_group: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    accessed_at: Optional[datetime] = None
    counts: MessageCounts = Field(default_factory=MessageCounts)
    message_count: Optional[int] = None
    default_message_time_to_live: Optional[timedelta] = None
    auto_delete_on_idle: Optional[timedelta] = None
    lock_duration: Optional[timedelta] = None
    enable_batched_operations: Optional[bool] = None
    dead_lettering_on_message_expiration: Optional[bool] = None
    dead_lettering_on_filter_evaluation_exceptions: Optional[bool] = None
    requires_session: Optional[bool] = None
    max_delivery_count: Optional[int] = None
    status: Optional[str] = None

    @classmethod
    def from_sdk(cls, subscription: Any) -> "SubscriptionSummary":
        return cls(
            id=subscription.id,
            name=subscription.name,
            resource_group=resource_group_from_id(subscription.id),
            created_at=getattr(subscription, "created_at", None),
            updated_at=getattr(subscription, "updated_at", None),
            accessed_at=getattr(subscription, "accessed_at", None),
            counts=MessageCounts.from_sdk(getattr(subscription, "count_details", None)),
            message_count=getattr(subscription, "message_count", None),
            default_message_time_to_live=getattr(subscription, "default_message_time_to_live", None),
            auto_delete_on_idle=getattr(subscription, "auto_delete_on_idle", None),
            lock_duration=getattr(subscription, "lock_duration", None),
            enable_batched_operations=getattr(subscription, "enable_batched_operations", None),
            dead_lettering_on_message_expiration=getattr(subscription, "dead_lettering_on_message_expiration", None),
            dead_lettering_on_filter_evaluation_exceptions=getattr(
                subscription, "dead_lettering_on_filter_evaluation_exceptions", None
            ),
            requires_session=getattr(subscription, "requires_session", None),
            max_delivery_count=getattr(subscription, "max_delivery_count", None),
            status=_enum_value(getattr(subscription, "status", None)),
        )


class AuthorizationRuleSummary(BaseModel):
    """Snapshot of a namespace authorization rule."""

    id: Optional[str] = None
    name: str
    resource_group: Optional[str] = None
    namespace_name: Optional[str] = None
    rights: List[str] = Field(default_factory=list)

    @classmethod
    def from_sdk(cls, rule: Any, namespace_name: Optional[str] = None) -> "AuthorizationRuleSummary":
        return cls(
            id=rule.id,
            name=rule.name,
            resource_group=resource_group_from_id(rule.id),
            namespace_name=namespace_name,
            rights=[_enum_value(right) for right in (getattr(rule, "rights", None) or [])],
        )


class AccessKeysSummary(BaseModel):
    """Keys and connection strings of an authorization rule."""

    key_name: Optional[str] = None
    primary_key: Optional[str] = None
    secondary_key: Optional[str] = None
    primary_connection_string: Optional[str] = None
    secondary_connection_string: Optional[str] = None

    @classmethod
    def from_sdk(cls, keys: Any) -> "AccessKeysSummary":
        return cls(
            key_name=getattr(keys, "key_name", None),
            primary_key=getattr(keys, "primary_key", None),
            secondary_key=getattr(keys, "secondary_key", None),
            primary_connection_string=getattr(keys, "primary_connection_string", None),
            secondary_connection_string=getattr(keys, "secondary_connection_string", None),
        )


class StepRecord(BaseModel):
    """Outcome of one workflow step."""

    name: str
    status: StepStatus = StepStatus.PENDING
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None
    error: Optional[str] = None


class WorkflowResult(BaseModel):
    """Record of a complete workflow run."""

    steps: List[StepRecord] = Field(default_factory=list)
    cleaned_up: List[ResourceHandle] = Field(default_factory=list)
    teardown_errors: List[str] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return bool(self.steps) and all(step.status == StepStatus.COMPLETED for step in self.steps)
