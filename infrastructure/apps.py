from django.apps import AppConfig
from django.conf import settings


class InfrastructureConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "infrastructure"

    def ready(self):
        if not getattr(settings, "OTEL_TRACING_ENABLED", False):
            return

        from infrastructure.observability.tracing import setup_tracing

        setup_tracing(
            service_name=getattr(settings, "OTEL_SERVICE_NAME", "booth-backend"),
            endpoint=getattr(settings, "OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318/v1/traces"),
        )
