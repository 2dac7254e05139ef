"""
Azure client for Service Bus provisioning operations.
"""

import logging
from datetime import timedelta
from typing import Iterable, List, Optional, Union

from azure.core.credentials import TokenCredential
from azure.identity import ClientSecretCredential, DefaultAzureCredential
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.servicebus import ServiceBusManagementClient
from azure.mgmt.servicebus.models import (
    RegenerateAccessKeyParameters,
    SBNamespace,
    SBSku,
    SBSubscription,
    SBTopic,
)

from .config import AzureConfig, Config, resolve_azure_config
from .models import (
    AccessKeysSummary,
    AuthorizationRuleSummary,
    KeyType,
    NamespaceSkuName,
    NamespaceSummary,
    SubscriptionSummary,
    TopicSummary,
)


def build_credential(azure: AzureConfig) -> TokenCredential:
    """Use the configured service principal, else the default credential chain."""
    if azure.has_service_principal:
        return ClientSecretCredential(
            tenant_id=azure.tenant_id,
            client_id=azure.client_id,
            client_secret=azure.client_secret
        )
    return DefaultAzureCredential()


class ServiceBusProvisioningClient:
    """Azure client for Service Bus resource provisioning operations."""

    def __init__(
        self,
        credential: TokenCredential,
        subscription_id: str,
        resource_client: Optional[ResourceManagementClient] = None,
        servicebus_client: Optional[ServiceBusManagementClient] = None,
    ):
        """Initialize the management clients for one Azure subscription."""
        self.credential = credential
        self.subscription_id = subscription_id

        self.resource_client = resource_client or ResourceManagementClient(
            credential=self.credential,
            subscription_id=self.subscription_id
        )

        self.servicebus_client = servicebus_client or ServiceBusManagementClient(
            credential=self.credential,
            subscription_id=self.subscription_id
        )

        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, settings: Config) -> "ServiceBusProvisioningClient":
        """Authenticate with the configured credentials."""
        azure = resolve_azure_config(settings.azure)
        return cls(build_credential(azure), azure.subscription_id)

    # Resource groups

    def create_resource_group(self, name: str, location: str) -> str:
        """Create or update a resource group and return its id."""
        self.logger.info(f"Creating resource group {name} in {location}")
        group = self.resource_client.resource_groups.create_or_update(
            name,
            {"location": location}
        )
        return group.id

    def delete_resource_group(self, name: str, wait: bool = True) -> None:
        """Delete a resource group and everything in it."""
        self.logger.info(f"Deleting resource group {name}")
        poller = self.resource_client.resource_groups.begin_delete(name)
        if wait:
            poller.result()

    # Namespaces

    def create_namespace(
        self,
        resource_group: str,
        name: str,
        location: str,
        sku: Union[NamespaceSkuName, str] = NamespaceSkuName.STANDARD,
    ) -> NamespaceSummary:
        """Create a namespace and wait for provisioning to finish."""
        sku_name = NamespaceSkuName(sku).value
        self.logger.info(f"Creating namespace {name} ({sku_name}) in resource group {resource_group}")
        poller = self.servicebus_client.namespaces.begin_create_or_update(
            resource_group,
            name,
            SBNamespace(location=location, sku=SBSku(name=sku_name, tier=sku_name))
        )
        return NamespaceSummary.from_sdk(poller.result())

    def get_namespace(self, resource_group: str, name: str) -> NamespaceSummary:
        return NamespaceSummary.from_sdk(self.servicebus_client.namespaces.get(resource_group, name))

    def delete_namespace(self, resource_group: str, name: str) -> None:
        """Delete a namespace along with its topics and subscriptions."""
        self.logger.info(f"Deleting namespace {name}")
        self.servicebus_client.namespaces.begin_delete(resource_group, name).result()

    # Topics

    def create_topic(self, resource_group: str, namespace: str, name: str, max_size_mb: int) -> TopicSummary:
        self.logger.info(f"Creating topic {name} in namespace {namespace}")
        topic = self.servicebus_client.topics.create_or_update(
            resource_group,
            namespace,
            name,
            SBTopic(max_size_in_megabytes=max_size_mb)
        )
        return TopicSummary.from_sdk(topic)

    def get_topic(self, resource_group: str, namespace: str, name: str) -> TopicSummary:
        return TopicSummary.from_sdk(self.servicebus_client.topics.get(resource_group, namespace, name))

    def list_topics(self, resource_group: str, namespace: str) -> List[TopicSummary]:
        topics = self.servicebus_client.topics.list_by_namespace(resource_group, namespace)
        return [TopicSummary.from_sdk(topic) for topic in topics]

    def delete_topic(self, resource_group: str, namespace: str, name: str) -> None:
        self.logger.info(f"Deleting topic {name} in namespace {namespace}")
        self.servicebus_client.topics.delete(resource_group, namespace, name)

    def update_topic(
        self,
        resource_group: str,
        namespace: str,
        name: str,
        max_size_mb: Optional[int] = None,
        new_subscriptions: Iterable[str] = (),
        removed_subscriptions: Iterable[str] = (),
    ) -> TopicSummary:
        """
        Apply changes to a topic and its subscriptions in one call.

        Args:
            resource_group: Resource group holding the namespace
            namespace: Namespace holding the topic
            name: Topic name
            max_size_mb: New maximum size, unchanged when None
            new_subscriptions: Subscriptions to create on the topic
            removed_subscriptions: Subscriptions to delete from the topic

        Returns:
            TopicSummary: The topic as reported after all changes
        """
        if max_size_mb is not None:
            self.logger.info(f"Resizing topic {name} to {max_size_mb} MB")
            topic = self.servicebus_client.topics.get(resource_group, namespace, name)
            topic.max_size_in_megabytes = max_size_mb
            self.servicebus_client.topics.create_or_update(resource_group, namespace, name, topic)

        for subscription in new_subscriptions:
            self.create_subscription(resource_group, namespace, name, subscription)

        for subscription in removed_subscriptions:
            self.delete_subscription(resource_group, namespace, name, subscription)

        return self.get_topic(resource_group, namespace, name)

    # Subscriptions

    def create_subscription(
        self,
        resource_group: str,
        namespace: str,
        topic: str,
        name: str,
        idle_minutes: Optional[int] = None,
        requires_session: bool = False,
    ) -> SubscriptionSummary:
        self.logger.info(f"Creating subscription {name} on topic {topic}")
        parameters = SBSubscription(requires_session=requires_session)
        if idle_minutes is not None:
            parameters.auto_delete_on_idle = timedelta(minutes=idle_minutes)
        subscription = self.servicebus_client.subscriptions.create_or_update(
            resource_group,
            namespace,
            topic,
            name,
            parameters
        )
        return SubscriptionSummary.from_sdk(subscription)

    def get_subscription(self, resource_group: str, namespace: str, topic: str, name: str) -> SubscriptionSummary:
        subscription = self.servicebus_client.subscriptions.get(resource_group, namespace, topic, name)
        return SubscriptionSummary.from_sdk(subscription)

    def list_subscriptions(self, resource_group: str, namespace: str, topic: str) -> List[SubscriptionSummary]:
        subscriptions = self.servicebus_client.subscriptions.list_by_topic(resource_group, namespace, topic)
        return [SubscriptionSummary.from_sdk(subscription) for subscription in subscriptions]

    def delete_subscription(self, resource_group: str, namespace: str, topic: str, name: str) -> None:
        self.logger.info(f"Deleting subscription {name} from topic {topic}")
        self.servicebus_client.subscriptions.delete(resource_group, namespace, topic, name)

    # Authorization rules

    def list_authorization_rules(self, resource_group: str, namespace: str) -> List[AuthorizationRuleSummary]:
        rules = self.servicebus_client.namespaces.list_authorization_rules(resource_group, namespace)
        return [AuthorizationRuleSummary.from_sdk(rule, namespace_name=namespace) for rule in rules]

    def get_keys(self, resource_group: str, namespace: str, rule: str) -> AccessKeysSummary:
        keys = self.servicebus_client.namespaces.list_keys(resource_group, namespace, rule)
        return AccessKeysSummary.from_sdk(keys)

    def regenerate_key(
        self,
        resource_group: str,
        namespace: str,
        rule: str,
        key_type: Union[KeyType, str] = KeyType.SECONDARY,
    ) -> AccessKeysSummary:
        """Regenerate one key of a namespace authorization rule."""
        key = KeyType(key_type).value
        self.logger.info(f"Regenerating {key} of authorization rule {rule}")
        keys = self.servicebus_client.namespaces.regenerate_keys(
            resource_group,
            namespace,
            rule,
            RegenerateAccessKeyParameters(key_type=key)
        )
        return AccessKeysSummary.from_sdk(keys)
