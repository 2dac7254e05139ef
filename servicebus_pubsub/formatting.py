"""
Human-readable summaries of provisioned resources.
"""

from typing import Any, List, Tuple

from .models import (
    AccessKeysSummary,
    AuthorizationRuleSummary,
    NamespaceSummary,
    SubscriptionSummary,
    TopicSummary,
)


def _value(value: Any) -> str:
    return "" if value is None else str(value)


def _render(header: str, fields: List[Tuple[str, Any]], indent: int = 1) -> str:
    lines = [header]
    prefix = "\t" * indent
    for label, value in fields:
        lines.append(f"{prefix}{label}: {_value(value)}")
    return "\n".join(lines)


def format_namespace(namespace: NamespaceSummary) -> str:
    text = _render(f"Service bus Namespace: {_value(namespace.id)}", [
        ("Name", namespace.name),
        ("Region", namespace.location),
        ("ResourceGroupName", namespace.resource_group),
        ("CreatedAt", namespace.created_at),
        ("UpdatedAt", namespace.updated_at),
        ("DnsLabel", namespace.dns_label),
        ("FQDN", namespace.fqdn),
    ])
    sku = _render("\tSku:", [
        ("Capacity", namespace.sku_capacity),
        ("SkuName", namespace.sku_name),
        ("Tier", namespace.sku_tier),
    ], indent=2)
    return f"{text}\n{sku}"


def format_topic(topic: TopicSummary) -> str:
    counts = topic.counts
    return _render(f"Service bus topic: {_value(topic.id)}", [
        ("Name", topic.name),
        ("ResourceGroupName", topic.resource_group),
        ("CreatedAt", topic.created_at),
        ("UpdatedAt", topic.updated_at),
        ("AccessedAt", topic.accessed_at),
        ("ActiveMessageCount", counts.active_message_count),
        ("CurrentSizeInBytes", topic.size_in_bytes),
        ("DeadLetterMessageCount", counts.dead_letter_message_count),
        ("DefaultMessageTtlDuration", topic.default_message_time_to_live),
        ("DuplicateMessageDetectionHistoryDuration", topic.duplicate_detection_history_time_window),
        ("IsBatchedOperationsEnabled", topic.enable_batched_operations),
        ("IsDuplicateDetectionEnabled", topic.requires_duplicate_detection),
        ("IsExpressEnabled", topic.enable_express),
        ("IsPartitioningEnabled", topic.enable_partitioning),
        ("DeleteOnIdleDuration", topic.auto_delete_on_idle),
        ("MaxSizeInMB", topic.max_size_in_megabytes),
        ("ScheduledMessageCount", counts.scheduled_message_count),
        ("Status", topic.status),
        ("TransferMessageCount", counts.transfer_message_count),
        ("SubscriptionCount", topic.subscription_count),
        ("TransferDeadLetterMessageCount", counts.transfer_dead_letter_message_count),
    ])


def format_subscription(subscription: SubscriptionSummary) -> str:
    counts = subscription.counts
    return _render(f"Service bus subscription: {_value(subscription.id)}", [
        ("Name", subscription.name),
        ("ResourceGroupName", subscription.resource_group),
        ("CreatedAt", subscription.created_at),
        ("UpdatedAt", subscription.updated_at),
        ("AccessedAt", subscription.accessed_at),
        ("ActiveMessageCount", counts.active_message_count),
        ("DeadLetterMessageCount", counts.dead_letter_message_count),
        ("DefaultMessageTtlDuration", subscription.default_message_time_to_live),
        ("IsBatchedOperationsEnabled", subscription.enable_batched_operations),
        ("DeleteOnIdleDuration", subscription.auto_delete_on_idle),
        ("ScheduledMessageCount", counts.scheduled_message_count),
        ("Status", subscription.status),
        ("TransferMessageCount", counts.transfer_message_count),
        ("IsDeadLetteringEnabledForExpiredMessages", subscription.dead_lettering_on_message_expiration),
        ("IsSessionEnabled", subscription.requires_session),
        ("LockDuration", subscription.lock_duration),
        ("MaxDeliveryCountBeforeDeadLetteringMessage", subscription.max_delivery_count),
        ("IsDeadLetteringEnabledForFilterEvaluationFailedMessages",
         subscription.dead_lettering_on_filter_evaluation_exceptions),
        ("TransferDeadLetterMessageCount", counts.transfer_dead_letter_message_count),
    ])


def format_authorization_rule(rule: AuthorizationRuleSummary) -> str:
    text = _render(f"Service bus namespace authorization rule: {_value(rule.id)}", [
        ("Name", rule.name),
        ("ResourceGroupName", rule.resource_group),
        ("Namespace Name", rule.namespace_name),
        ("Number of access rights", len(rule.rights)),
    ])
    rights = [f"\t\tAccessRight:\n\t\t\tName: {right}" for right in rule.rights]
    return "\n".join([text] + rights)


def format_keys(keys: AccessKeysSummary) -> str:
    return _render("Authorization keys:", [
        ("PrimaryKey", keys.primary_key),
        ("PrimaryConnectionString", keys.primary_connection_string),
        ("SecondaryKey", keys.secondary_key),
        ("SecondaryConnectionString", keys.secondary_connection_string),
    ])
