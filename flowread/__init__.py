"""FlowRead - RSVP speed reading with a durable book library."""

__version__ = "0.1.0"
