"""
Infrastructure Package
======================

Cross-cutting wiring shared by the domain apps.

Modules:
    - container: composition root building repositories and services
    - observability: OpenTelemetry tracing setup
"""
