"""In-memory stand-ins for the Azure management clients."""

from __future__ import annotations

import itertools
from types import SimpleNamespace
from typing import Any

import pytest
from azure.core.exceptions import ResourceNotFoundError

from servicebus_pubsub.azure_client import ServiceBusProvisioningClient
from servicebus_pubsub.config import SampleConfig
from servicebus_pubsub.naming import SampleNames

SUBSCRIPTION_ID = "00000000-0000-0000-0000-000000000000"


class _Poller:
    def __init__(self, value: Any = None) -> None:
        self._value = value

    def result(self) -> Any:
        return self._value


class FakeAzure:
    """Shared state behind the fake resource and Service Bus clients."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.fail_on: dict[str, Exception] = {}
        self.groups: dict[str, str] = {}
        self.namespaces: dict[tuple[str, str], SimpleNamespace] = {}
        self.topics: dict[tuple[str, str, str], int] = {}
        self.subscriptions: dict[tuple[str, str, str, str], SimpleNamespace] = {}
        self.keys: dict[tuple[str, str, str], dict[str, str]] = {}
        self._key_counter = itertools.count(1)

        self.resource_client = SimpleNamespace(resource_groups=_FakeResourceGroups(self))
        self.servicebus_client = SimpleNamespace(
            namespaces=_FakeNamespaces(self),
            topics=_FakeTopics(self),
            subscriptions=_FakeSubscriptions(self),
        )

    def record(self, operation: str, *args: str) -> None:
        self.calls.append((operation, *args))
        if operation in self.fail_on:
            raise self.fail_on[operation]

    def operations(self) -> list[str]:
        return [call[0] for call in self.calls]

    def new_key(self) -> str:
        return f"key-{next(self._key_counter)}"

    def require_group(self, rg: str) -> None:
        if rg not in self.groups:
            raise ResourceNotFoundError(f"Resource group '{rg}' could not be found.")

    def require_namespace(self, rg: str, ns: str) -> None:
        self.require_group(rg)
        if (rg, ns) not in self.namespaces:
            raise ResourceNotFoundError(f"Namespace '{ns}' could not be found.")

    def require_topic(self, rg: str, ns: str, topic: str) -> None:
        self.require_namespace(rg, ns)
        if (rg, ns, topic) not in self.topics:
            raise ResourceNotFoundError(f"Topic '{topic}' could not be found.")


def _ns_id(rg: str, ns: str) -> str:
    return (
        f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/{rg}"
        f"/providers/Microsoft.ServiceBus/namespaces/{ns}"
    )


class _FakeResourceGroups:
    def __init__(self, azure: FakeAzure) -> None:
        self._azure = azure

    def create_or_update(self, name: str, parameters: dict) -> SimpleNamespace:
        self._azure.record("resource_groups.create_or_update", name)
        group_id = f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/{name}"
        self._azure.groups[name] = parameters["location"]
        return SimpleNamespace(id=group_id, name=name, location=parameters["location"])

    def begin_delete(self, name: str) -> _Poller:
        self._azure.record("resource_groups.begin_delete", name)
        self._azure.require_group(name)
        del self._azure.groups[name]
        for store in (self._azure.namespaces, self._azure.topics, self._azure.subscriptions, self._azure.keys):
            for key in [key for key in store if key[0] == name]:
                del store[key]
        return _Poller()


class _FakeNamespaces:
    def __init__(self, azure: FakeAzure) -> None:
        self._azure = azure

    def begin_create_or_update(self, rg: str, name: str, parameters: Any) -> _Poller:
        self._azure.record("namespaces.begin_create_or_update", rg, name)
        self._azure.require_group(rg)
        namespace = SimpleNamespace(
            id=_ns_id(rg, name),
            name=name,
            location=parameters.location,
            sku=parameters.sku,
            created_at=None,
            updated_at=None,
            service_bus_endpoint=f"https://{name}.servicebus.windows.net:443/",
            provisioning_state="Succeeded",
        )
        self._azure.namespaces[(rg, name)] = namespace
        self._azure.keys[(rg, name, "RootManageSharedAccessKey")] = {
            "primary": self._azure.new_key(),
            "secondary": self._azure.new_key(),
        }
        return _Poller(namespace)

    def get(self, rg: str, name: str) -> SimpleNamespace:
        self._azure.record("namespaces.get", rg, name)
        self._azure.require_namespace(rg, name)
        return self._azure.namespaces[(rg, name)]

    def begin_delete(self, rg: str, name: str) -> _Poller:
        self._azure.record("namespaces.begin_delete", rg, name)
        self._azure.require_namespace(rg, name)
        del self._azure.namespaces[(rg, name)]
        for store in (self._azure.topics, self._azure.subscriptions, self._azure.keys):
            for key in [key for key in store if key[:2] == (rg, name)]:
                del store[key]
        return _Poller()

    def list_authorization_rules(self, rg: str, name: str) -> list[SimpleNamespace]:
        self._azure.record("namespaces.list_authorization_rules", rg, name)
        self._azure.require_namespace(rg, name)
        return [
            SimpleNamespace(
                id=f"{_ns_id(rg, name)}/AuthorizationRules/{rule}",
                name=rule,
                rights=["Listen", "Manage", "Send"],
            )
            for (group, ns, rule) in self._azure.keys
            if (group, ns) == (rg, name)
        ]

    def _keys(self, rg: str, name: str, rule: str) -> SimpleNamespace:
        keys = self._azure.keys[(rg, name, rule)]
        endpoint = f"Endpoint=sb://{name}.servicebus.windows.net/;SharedAccessKeyName={rule}"
        return SimpleNamespace(
            key_name=rule,
            primary_key=keys["primary"],
            secondary_key=keys["secondary"],
            primary_connection_string=f"{endpoint};SharedAccessKey={keys['primary']}",
            secondary_connection_string=f"{endpoint};SharedAccessKey={keys['secondary']}",
        )

    def list_keys(self, rg: str, name: str, rule: str) -> SimpleNamespace:
        self._azure.record("namespaces.list_keys", rg, name, rule)
        self._azure.require_namespace(rg, name)
        return self._keys(rg, name, rule)

    def regenerate_keys(self, rg: str, name: str, rule: str, parameters: Any) -> SimpleNamespace:
        self._azure.record("namespaces.regenerate_keys", rg, name, rule)
        self._azure.require_namespace(rg, name)
        slot = "primary" if parameters.key_type == "PrimaryKey" else "secondary"
        self._azure.keys[(rg, name, rule)][slot] = self._azure.new_key()
        return self._keys(rg, name, rule)


class _FakeTopics:
    def __init__(self, azure: FakeAzure) -> None:
        self._azure = azure

    def _topic(self, rg: str, ns: str, name: str) -> SimpleNamespace:
        count = sum(1 for key in self._azure.subscriptions if key[:3] == (rg, ns, name))
        return SimpleNamespace(
            id=f"{_ns_id(rg, ns)}/topics/{name}",
            name=name,
            max_size_in_megabytes=self._azure.topics[(rg, ns, name)],
            subscription_count=count,
            status="Active",
        )

    def create_or_update(self, rg: str, ns: str, name: str, parameters: Any) -> SimpleNamespace:
        self._azure.record("topics.create_or_update", rg, ns, name)
        self._azure.require_namespace(rg, ns)
        self._azure.topics[(rg, ns, name)] = parameters.max_size_in_megabytes
        return self._topic(rg, ns, name)

    def get(self, rg: str, ns: str, name: str) -> SimpleNamespace:
        self._azure.record("topics.get", rg, ns, name)
        self._azure.require_topic(rg, ns, name)
        return self._topic(rg, ns, name)

    def list_by_namespace(self, rg: str, ns: str) -> list[SimpleNamespace]:
        self._azure.record("topics.list_by_namespace", rg, ns)
        self._azure.require_namespace(rg, ns)
        return [self._topic(*key) for key in self._azure.topics if key[:2] == (rg, ns)]

    def delete(self, rg: str, ns: str, name: str) -> None:
        self._azure.record("topics.delete", rg, ns, name)
        self._azure.require_topic(rg, ns, name)
        del self._azure.topics[(rg, ns, name)]
        for key in [key for key in self._azure.subscriptions if key[:3] == (rg, ns, name)]:
            del self._azure.subscriptions[key]


class _FakeSubscriptions:
    def __init__(self, azure: FakeAzure) -> None:
        self._azure = azure

    def create_or_update(self, rg: str, ns: str, topic: str, name: str, parameters: Any) -> SimpleNamespace:
        self._azure.record("subscriptions.create_or_update", rg, ns, topic, name)
        self._azure.require_topic(rg, ns, topic)
        subscription = SimpleNamespace(
            id=f"{_ns_id(rg, ns)}/topics/{topic}/subscriptions/{name}",
            name=name,
            auto_delete_on_idle=parameters.auto_delete_on_idle,
            requires_session=parameters.requires_session,
            status="Active",
        )
        self._azure.subscriptions[(rg, ns, topic, name)] = subscription
        return subscription

    def get(self, rg: str, ns: str, topic: str, name: str) -> SimpleNamespace:
        self._azure.record("subscriptions.get", rg, ns, topic, name)
        self._azure.require_topic(rg, ns, topic)
        try:
            return self._azure.subscriptions[(rg, ns, topic, name)]
        except KeyError:
            raise ResourceNotFoundError(f"Subscription '{name}' could not be found.")

    def list_by_topic(self, rg: str, ns: str, topic: str) -> list[SimpleNamespace]:
        self._azure.record("subscriptions.list_by_topic", rg, ns, topic)
        self._azure.require_topic(rg, ns, topic)
        return [sub for key, sub in self._azure.subscriptions.items() if key[:3] == (rg, ns, topic)]

    def delete(self, rg: str, ns: str, topic: str, name: str) -> None:
        self._azure.record("subscriptions.delete", rg, ns, topic, name)
        self._azure.require_topic(rg, ns, topic)
        if (rg, ns, topic, name) not in self._azure.subscriptions:
            raise ResourceNotFoundError(f"Subscription '{name}' could not be found.")
        del self._azure.subscriptions[(rg, ns, topic, name)]


@pytest.fixture
def fake_azure() -> FakeAzure:
    return FakeAzure()


@pytest.fixture
def client(fake_azure: FakeAzure) -> ServiceBusProvisioningClient:
    return ServiceBusProvisioningClient(
        credential=object(),
        subscription_id=SUBSCRIPTION_ID,
        resource_client=fake_azure.resource_client,
        servicebus_client=fake_azure.servicebus_client,
    )


@pytest.fixture
def sample_config() -> SampleConfig:
    return SampleConfig(location="westus", sku="Standard")


@pytest.fixture
def names() -> SampleNames:
    return SampleNames(
        resource_group="rgSB02_test",
        namespace="namespacetest",
        topic="topic_test",
        first_subscription="sub1_test",
        second_subscription="sub2_test",
    )


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path):
    """Keep real Azure settings and .env files out of the tests."""
    for variable in (
        "AZURE_SUBSCRIPTION_ID",
        "AZURE_TENANT_ID",
        "AZURE_CLIENT_ID",
        "AZURE_CLIENT_SECRET",
        "AZURE_AUTH_LOCATION",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(variable, raising=False)
    monkeypatch.chdir(tmp_path)
