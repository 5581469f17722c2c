"""Cross-cutting building blocks shared by every layer.

- **config**: settings loaded from the environment
- **context**: request scoped correlation and user identifiers
- **exceptions**: error hierarchy with codes and severities
- **error_context**: redaction of sensitive values
- **logging**: Loguru setup and standard library interception
- **observability**: OpenTelemetry tracing
- **types**: shared type aliases
"""
