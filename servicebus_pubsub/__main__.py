from .cli import app

app(prog_name="servicebus-pubsub")
