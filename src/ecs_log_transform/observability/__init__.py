"""
ecs_log_transform.observability

Logging-pipeline adapters.

Responsibilities:
- structlog processor that renders events as ECS JSON.
- One-call setup routing structlog and stdlib logging through that processor.
"""

# Package marker.
