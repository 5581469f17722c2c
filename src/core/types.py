"""Type aliases for dynamic data structures used across the application."""

# Any valid JSON value, used for cached payloads
type JsonValue = (
    dict[str, JsonValue] | list[JsonValue] | str | int | float | bool | None
)
