"""
Azure Service Bus publish/subscribe provisioning sample.

This package provisions a Service Bus namespace, a topic, two subscriptions
and inspects the namespace authorization rules through the Azure management
API, then tears everything down again.
"""

__version__ = "1.0.0"
__author__ = "Service Bus Samples Team"
