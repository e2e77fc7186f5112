from dataclasses import dataclass, field


@dataclass
class UnitMetrics:
    """Track scraping metrics for each year or tour."""
    name: str
    show_count: int = 0
    errors: int = 0
    error_messages: list = field(default_factory=list)
    duration_ms: float = 0.0
