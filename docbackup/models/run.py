# =============================================================================
# Run Models
# =============================================================================
# Run options, run mode, stats snapshot and run summary.
# =============================================================================

from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, Field

from ..errors import InvalidRunModeError
from .query import QuerySpec

__all__ = [
    "RunMode",
    "RunOptions",
    "StatsSnapshot",
    "RunSummary",
    "DEFAULT_PAGE_SIZE",
    "resolve_run_options",
]


DEFAULT_PAGE_SIZE = 100
RUN_MODE_KEYS = ("run_mode", "runMode")


class RunMode(str, Enum):
    """
    How documents of a page are dispatched.

    SINGLE handles one document at a time. Slower, but keeps request cost
    spread out. MULTI starts every document of a page at once and waits for
    the whole page. Faster, with request cost arriving in bursts.
    """

    SINGLE = "single"
    MULTI = "multi"

    @classmethod
    def coerce(cls, value: object) -> "RunMode":
        """Convert a raw value to a RunMode or raise InvalidRunModeError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidRunModeError(value) from None


class RunOptions(BaseModel):
    """
    Options for a single backup or cleaning run.

    Defaults are the safe ones: dry run on, single mode, 100 documents per
    page. Options may be given by field name or in camelCase (``pageSize``,
    ``dryRun``, ``runMode``, ``partitionKeyField``); unknown keys are rejected.

    Attributes:
        query: Query selecting the documents to handle
        page_size: Number of documents fetched per page
        dry_run: When true no write is issued against any container
        run_mode: single or multi dispatch
        partition_key_field: Overrides the controller's partition key field
    """

    model_config = {"frozen": True, "extra": "forbid"}

    query: QuerySpec = Field(default_factory=QuerySpec, description="Source query")
    page_size: int = Field(
        DEFAULT_PAGE_SIZE,
        gt=0,
        validation_alias=AliasChoices("page_size", "pageSize"),
        description="Documents per page",
    )
    dry_run: bool = Field(
        True,
        validation_alias=AliasChoices("dry_run", "dryRun"),
        description="Skip every write when true",
    )
    run_mode: RunMode = Field(
        RunMode.SINGLE,
        validation_alias=AliasChoices("run_mode", "runMode"),
        description="Dispatch mode",
    )
    partition_key_field: Optional[str] = Field(
        None,
        min_length=1,
        validation_alias=AliasChoices("partition_key_field", "partitionKeyField"),
        description="Partition key field name override",
    )


def resolve_run_options(options: Union[RunOptions, Mapping[str, Any], None]) -> RunOptions:
    """
    Apply defaults over caller-supplied options.

    The run mode is checked before model validation so that an unknown mode
    surfaces as InvalidRunModeError rather than a generic validation error.

    Raises:
        InvalidRunModeError: If run_mode is not "single" or "multi"
        pydantic.ValidationError: If any other option is invalid or unknown
    """
    if options is None:
        return RunOptions()
    if isinstance(options, RunOptions):
        return options
    data = dict(options)
    for key in RUN_MODE_KEYS:
        if key in data:
            data[key] = RunMode.coerce(data[key])
    return RunOptions(**data)


class StatsSnapshot(BaseModel):
    """Point-in-time copy of a run's counters."""

    model_config = {"frozen": True}

    pages: int = 0
    current_document: int = 0
    total_cost: float = 0.0
    backups: int = 0
    updates: int = 0
    documents_examined: int = 0
    successful_verifications: int = 0
    unsuccessful_verifications: int = 0


class RunSummary(BaseModel):
    """
    Outcome of a finished (or failed) run.

    Attributes:
        job_name: Job that produced the run
        run_mode: Dispatch mode used
        dry_run: Whether writes were skipped
        elapsed_ms: Wall-clock duration in milliseconds
        stats: Final counters
        succeeded: False when the run ended in failure
        error_message: Representative error of a failed run
    """

    job_name: str
    run_mode: RunMode
    dry_run: bool
    elapsed_ms: float = Field(..., ge=0)
    stats: StatsSnapshot
    succeeded: bool = True
    error_message: Optional[str] = None

    @property
    def elapsed_seconds(self) -> float:
        return self.elapsed_ms / 1000

    @property
    def cost_per_second(self) -> float:
        """Average request cost per second, 0 when nothing was measured."""
        if self.elapsed_ms <= 0:
            return 0.0
        return self.stats.total_cost / self.elapsed_seconds

    def report_lines(self) -> list[str]:
        """Human-readable summary, one line per figure."""
        stats = self.stats
        return [
            f"Total time used: {self.elapsed_ms:.0f}ms -> {self.elapsed_seconds:.3f}s",
            f"Total amount of request cost used: {stats.total_cost}",
            f"Estimated amount of average request cost/s: {self.cost_per_second:.2f}",
            f"Total amount of pages: {stats.pages}",
            f"Total amount of documents looked at: {stats.documents_examined}",
            f"Total amount of unsuccessful verifications: {stats.unsuccessful_verifications}",
            f"Total amount of successful verifications: {stats.successful_verifications}",
            f"Total amount of backups taken: {stats.backups}",
            f"Total amount of updates: {stats.updates}",
        ]
