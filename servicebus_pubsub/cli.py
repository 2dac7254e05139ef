"""Typer CLI for the Service Bus publish/subscribe sample."""

import logging
from typing import Optional

import typer

from .azure_client import ServiceBusProvisioningClient
from .config import config
from .sample import PublishSubscribeSample

app = typer.Typer(name="servicebus-pubsub", help="Azure Service Bus publish/subscribe sample")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@app.callback()
def main() -> None:
    """Provision and tear down Service Bus messaging resources."""


@app.command()
def run(
    location: Optional[str] = typer.Option(None, help="Azure region for the resources"),
    sku: Optional[str] = typer.Option(None, help="Namespace SKU: Basic, Standard or Premium"),
    auth_file: Optional[str] = typer.Option(None, help="Service principal auth file"),
    log_level: Optional[str] = typer.Option(None, help="Logging level"),
) -> None:
    """Run the publish/subscribe basic scenario."""
    configure_logging(log_level or config.monitoring.log_level)

    sample_config = config.sample.model_copy(update={
        key: value for key, value in {"location": location, "sku": sku}.items() if value
    })
    settings = config
    if auth_file:
        settings = config.model_copy(update={
            "azure": config.azure.model_copy(update={"auth_location": auth_file})
        })

    try:
        client = ServiceBusProvisioningClient.from_config(settings)
        typer.echo(f"Selected subscription: {client.subscription_id}")
        PublishSubscribeSample(client, sample_config, emit=typer.echo).run()
    except Exception as e:
        logging.getLogger(__name__).debug("Sample failed", exc_info=True)
        typer.echo(repr(e), err=True)
        raise typer.Exit(1)
