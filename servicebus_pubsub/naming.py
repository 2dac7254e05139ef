"""
Random resource names for the sample's Azure resources.
"""

import secrets

from pydantic import BaseModel

from .config import SampleConfig


def random_resource_name(prefix: str, max_len: int) -> str:
    """
    Build a name from a prefix padded with random hex characters.

    The result is exactly ``max_len`` characters long. A prefix that is
    already ``max_len`` characters or longer is truncated.
    """
    if max_len <= 0:
        raise ValueError("max_len must be positive")
    if len(prefix) >= max_len:
        return prefix[:max_len]
    suffix_len = max_len - len(prefix)
    return prefix + secrets.token_hex((suffix_len + 1) // 2)[:suffix_len]


class SampleNames(BaseModel):
    """Names of every resource one sample run creates."""

    resource_group: str
    namespace: str
    topic: str
    first_subscription: str
    second_subscription: str

    @classmethod
    def generate(cls, sample: SampleConfig) -> "SampleNames":
        return cls(
            resource_group=random_resource_name(sample.resource_group_prefix, sample.resource_group_name_length),
            namespace=random_resource_name(sample.namespace_prefix, sample.namespace_name_length),
            topic=random_resource_name(sample.topic_prefix, sample.topic_name_length),
            first_subscription=random_resource_name(
                sample.first_subscription_prefix, sample.subscription_name_length
            ),
            second_subscription=random_resource_name(
                sample.second_subscription_prefix, sample.subscription_name_length
            ),
        )
