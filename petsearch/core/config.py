"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field


# Weather providers whose payloads the core can normalize
SUPPORTED_WEATHER_PROVIDERS = ("openweathermap", "weatherapi")

# Backends for the per-channel daily alert counters
SUPPORTED_COUNTER_BACKENDS = ("memory", "firestore")


@dataclass
class WeatherConfig:
    """Weather provider configuration.

    Attributes:
        provider: Provider name ('openweathermap' or 'weatherapi')
        api_key: Provider API key (None disables fetching)
        timeout_seconds: Upper bound on a single fetch
        enabled: If False, the pipeline never fetches weather
    """
    provider: str = "openweathermap"
    api_key: str | None = None
    timeout_seconds: float = 5.0
    enabled: bool = True


@dataclass
class TelemetryConfig:
    """Telemetry reporting configuration.

    Attributes:
        endpoint_url: Aggregation endpoint (None disables reporting)
        timeout_seconds: Per-attempt request timeout
        max_attempts: Attempts before a report is dropped
        max_pending: Queued reports beyond which new ones are dropped
        system_name: Reporting system identifier
    """
    endpoint_url: str | None = None
    timeout_seconds: float = 5.0
    max_attempts: int = 3
    max_pending: int = 100
    system_name: str = "petsearch"

    @property
    def enabled(self) -> bool:
        return bool(self.endpoint_url)


@dataclass
class CounterStoreConfig:
    """Per-channel daily alert counter storage.

    Attributes:
        backend: 'memory' (single process) or 'firestore'
        firestore_database: Firestore database name (None for default)
        firestore_collection: Collection holding one document per channel/day
    """
    backend: str = "memory"
    firestore_database: str | None = None
    firestore_collection: str = "channel_alert_counts"


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        weather: Weather provider settings
        telemetry: Telemetry reporting settings
        counters: Daily alert counter settings
        default_coverage_area: Coverage area used to match partners when a
            request does not name one (county code such as 'WV-KAN')
    """
    weather: WeatherConfig = field(default_factory=WeatherConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    counters: CounterStoreConfig = field(default_factory=CounterStoreConfig)
    default_coverage_area: str | None = None


@dataclass
class ValidationError:
    """A validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lon: float, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lon: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= lat <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lon <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {lon} out of range [-180, 180]",
        ))

    return errors


def _find_similar_names(name: str, candidates: tuple[str, ...], threshold: float = 0.6) -> list[str]:
    """Find similar names using simple similarity metric.

    Pure function.

    Args:
        name: Name to match
        candidates: Available names
        threshold: Minimum similarity (0-1)

    Returns:
        Similar names sorted by similarity (best first)
    """
    def similarity(a: str, b: str) -> float:
        """Simple case-insensitive substring similarity."""
        a_lower, b_lower = a.lower(), b.lower()
        if a_lower == b_lower:
            return 1.0
        if a_lower in b_lower or b_lower in a_lower:
            return 0.8
        common = sum(1 for c in a_lower if c in b_lower)
        return common / max(len(a), len(b))

    scored = [(c, similarity(name, c)) for c in candidates]
    matches = [(c, s) for c, s in scored if s >= threshold]
    matches.sort(key=lambda x: x[1], reverse=True)

    return [c for c, _ in matches]


def _validate_choice(
    value: str,
    choices: tuple[str, ...],
    field_name: str,
) -> list[ValidationError]:
    if value in choices:
        return []

    similar = _find_similar_names(value, choices)
    if similar:
        message = f"Unknown value '{value}'. Did you mean '{similar[0]}'?"
    else:
        message = f"Unknown value '{value}' (expected one of: {', '.join(choices)})"

    return [ValidationError(field=field_name, message=message)]


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    errors.extend(_validate_choice(
        config.weather.provider,
        SUPPORTED_WEATHER_PROVIDERS,
        "weather.provider",
    ))

    if config.weather.timeout_seconds <= 0:
        errors.append(ValidationError(
            field="weather.timeout_seconds",
            message=f"Timeout must be positive, got {config.weather.timeout_seconds}",
        ))

    if config.weather.enabled and (
        not config.weather.api_key or config.weather.api_key.startswith("${")
    ):
        errors.append(ValidationError(
            field="weather.api_key",
            message="Weather API key not resolved; searches will run without wind data",
            severity="warning",
        ))

    if config.telemetry.max_attempts < 1:
        errors.append(ValidationError(
            field="telemetry.max_attempts",
            message=f"At least one attempt is required, got {config.telemetry.max_attempts}",
        ))

    if config.telemetry.timeout_seconds <= 0:
        errors.append(ValidationError(
            field="telemetry.timeout_seconds",
            message=f"Timeout must be positive, got {config.telemetry.timeout_seconds}",
        ))

    if config.telemetry.max_pending < 1:
        errors.append(ValidationError(
            field="telemetry.max_pending",
            message=f"At least one pending report is required, got {config.telemetry.max_pending}",
        ))

    errors.extend(_validate_choice(
        config.counters.backend,
        SUPPORTED_COUNTER_BACKENDS,
        "counters.backend",
    ))

    if config.counters.backend == "memory":
        errors.append(ValidationError(
            field="counters.backend",
            message="In-memory counters are per process; use 'firestore' when running more than one instance",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
