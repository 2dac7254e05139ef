"""
Service Bus publish/subscribe basic scenario.

- Create a resource group and a namespace.
- Create a topic.
- Update the topic with a new size and a new subscription.
- Create another subscription on the topic.
- List topics and subscriptions.
- Get the namespace authorization rules and their keys.
- Regenerate the secondary key of the first rule.
- Delete one subscription as part of a topic update.
- Delete the other subscription, the topic and the namespace.
- Delete the resource group.
"""

import logging
from typing import Callable, Optional

from azure.core.exceptions import ResourceNotFoundError

from .azure_client import ServiceBusProvisioningClient
from .config import SampleConfig
from .formatting import (
    format_authorization_rule,
    format_keys,
    format_namespace,
    format_subscription,
    format_topic,
)
from .models import KeyType, ResourceHandle, ResourceKind, WorkflowResult
from .naming import SampleNames
from .workflow import ProvisioningWorkflow


class PublishSubscribeSample:
    """Runs the publish/subscribe scenario against one Azure subscription."""

    def __init__(
        self,
        client: ServiceBusProvisioningClient,
        sample_config: SampleConfig,
        names: Optional[SampleNames] = None,
        emit: Callable[[str], None] = print,
    ):
        self.client = client
        self.sample_config = sample_config
        self.names = names or SampleNames.generate(sample_config)
        self.emit = emit
        self.logger = logging.getLogger(__name__)

    def run(self) -> WorkflowResult:
        """Provision, exercise and delete the sample resources."""
        names = self.names
        settings = self.sample_config
        rg = names.resource_group

        with ProvisioningWorkflow("servicebus-pubsub") as workflow:
            with workflow.step("create resource group"):
                group_id = self.client.create_resource_group(rg, settings.location)
                workflow.track(
                    ResourceHandle(kind=ResourceKind.RESOURCE_GROUP, name=rg, resource_id=group_id),
                    lambda: self.client.delete_resource_group(rg, wait=settings.wait_for_teardown),
                )

            with workflow.step("create namespace"):
                self.emit(f"Creating name space {names.namespace} in resource group {rg}...")
                namespace = self.client.create_namespace(rg, names.namespace, settings.location, settings.sku)
                namespace_handle = workflow.track(
                    ResourceHandle(
                        kind=ResourceKind.NAMESPACE,
                        name=namespace.name,
                        resource_id=namespace.id,
                        parent=rg,
                    ),
                    lambda: self.client.delete_namespace(rg, names.namespace),
                )
                self.emit(f"Created service bus {namespace.name}")
                self.emit(format_namespace(namespace))

            with workflow.step("create topic"):
                self.emit(f"Creating topic {names.topic} in namespace {names.namespace}...")
                topic = self.client.create_topic(rg, names.namespace, names.topic, settings.topic_size_mb)
                self.emit("Created topic in namespace")
                self.emit(format_topic(topic))

            with workflow.step("update topic"):
                self.emit(f"Updating topic {names.topic} with new size and a subscription...")
                topic = self.client.get_topic(rg, names.namespace, names.topic)
                topic = self.client.update_topic(
                    rg,
                    names.namespace,
                    topic.name,
                    max_size_mb=settings.updated_topic_size_mb,
                    new_subscriptions=[names.first_subscription],
                )
                self.emit("Updated topic to change its size in MB along with a subscription")
                self.emit(format_topic(topic))

                first_subscription = self.client.get_subscription(
                    rg, names.namespace, names.topic, names.first_subscription
                )
                self.emit(format_subscription(first_subscription))

            with workflow.step("create second subscription"):
                self.emit(f"Adding second subscription {names.second_subscription} to topic {names.topic}...")
                second_subscription = self.client.create_subscription(
                    rg,
                    names.namespace,
                    names.topic,
                    names.second_subscription,
                    idle_minutes=settings.subscription_idle_minutes,
                )
                self.emit(f"Added second subscription {names.second_subscription} to topic {names.topic}")
                self.emit(format_subscription(second_subscription))

            with workflow.step("list topics"):
                topics = self.client.list_topics(rg, names.namespace)
                self.emit(f"Number of topics in namespace: {len(topics)}")
                for topic_in_namespace in topics:
                    self.emit(format_topic(topic_in_namespace))

            with workflow.step("list subscriptions"):
                subscriptions = self.client.list_subscriptions(rg, names.namespace, names.topic)
                self.emit(f"Number of subscriptions to topic: {len(subscriptions)}")
                for subscription in subscriptions:
                    self.emit(format_subscription(subscription))

            with workflow.step("authorization rules"):
                self._show_authorization_rules()

            with workflow.step("delete first subscription"):
                self.emit(
                    f"Deleting subscription {names.first_subscription} in topic {names.topic} via update flow..."
                )
                topic = self.client.update_topic(
                    rg,
                    names.namespace,
                    names.topic,
                    removed_subscriptions=[names.first_subscription],
                )
                self.emit(f"Deleted subscription {names.first_subscription}...")
                self.emit(
                    "Number of subscriptions in the topic after deleting first subscription: "
                    f"{topic.subscription_count}"
                )

            with workflow.step("delete second subscription and topic"):
                self.emit(f"Deleting subscription {names.second_subscription}...")
                self.client.delete_subscription(rg, names.namespace, names.topic, names.second_subscription)
                self.emit(f"Deleting topic {names.topic}...")
                self.client.delete_topic(rg, names.namespace, names.topic)

            with workflow.step("delete namespace"):
                self.emit(f"Deleting namespace {names.namespace}...")
                try:
                    self.client.delete_namespace(rg, names.namespace)
                except ResourceNotFoundError:
                    self.logger.info(f"Namespace {names.namespace} is already gone")
                workflow.release(namespace_handle)
                self.emit(f"Deleted namespace {names.namespace}...")

        return workflow.result

    def _show_authorization_rules(self) -> None:
        names = self.names
        rg = names.resource_group

        rules = self.client.list_authorization_rules(rg, names.namespace)
        self.emit(f"Number of authorization rule for namespace: {len(rules)}")
        for rule in rules:
            self.emit(format_authorization_rule(rule))

        if not rules:
            self.logger.warning(f"Namespace {names.namespace} has no authorization rules, skipping keys")
            return

        rule = rules[0]
        self.emit("Getting keys for authorization rule ...")
        keys = self.client.get_keys(rg, names.namespace, rule.name)
        self.emit(format_keys(keys))

        self.emit("Regenerating secondary key for authorization rule ...")
        keys = self.client.regenerate_key(rg, names.namespace, rule.name, KeyType.SECONDARY)
        self.emit(format_keys(keys))
