"""
Resource Processors
===================

Pipeline stages that rewrite the content of a resource. Each processor
implements a single ``apply`` method returning the new bytes; stages are
composed by passing an ordered list to :func:`apply_processors` or
:func:`process_resources`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence
import logging

from epub_core.config.settings import ResourceConfig
from epub_core.domain.resource import Resource
from epub_core.domain.titles import DEFAULT_CHUNK_SIZE, find_title
from epub_core.encoding.detector import DEFAULT_PREFIX_SIZE
from epub_core.errors import EpubCoreError

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """
    Container for processing results.

    Attributes:
        resources_processed: Number of resources all stages ran on
        resources_changed: Number of resources whose content changed
        resources_failed: Number of resources a stage failed on
        errors: One dictionary per failure with keys:
            - href: Resource href
            - processor: Name of the failing processor
            - message: Error description
        metadata: Additional processing metadata
    """
    resources_processed: int = 0
    resources_changed: int = 0
    resources_failed: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.resources_failed == 0

    def add_error(self, href: str, processor: str, message: str) -> None:
        """Record a failed resource."""
        self.resources_failed += 1
        self.errors.append({
            'href': href,
            'processor': processor,
            'message': message,
        })

    def merge(self, other: 'ProcessResult') -> None:
        """Merge another result into this one."""
        self.resources_processed += other.resources_processed
        self.resources_changed += other.resources_changed
        self.resources_failed += other.resources_failed
        self.errors.extend(other.errors)
        self.metadata.update(other.metadata)

    def summary(self) -> str:
        """Generate a text summary of processing results."""
        status = "SUCCESS" if self.success else "FAILED"
        lines = [
            f"Processing: {status}",
            f"Resources processed: {self.resources_processed}",
            f"Resources changed: {self.resources_changed}",
            f"Resources failed: {self.resources_failed}",
        ]

        if self.errors:
            lines.append(f"\nErrors ({len(self.errors)}):")
            for error in self.errors[:5]:
                lines.append(f"  - {error['href']} [{error['processor']}]: {error['message']}")
            if len(self.errors) > 5:
                lines.append(f"  ... and {len(self.errors) - 5} more")

        return "\n".join(lines)


class ResourceProcessor(ABC):
    """
    Abstract base class for resource processing stages.

    Example:
        class UppercaseCss(ResourceProcessor):
            def apply(self, resource: Resource) -> bytes:
                if resource.media_type != CSS:
                    return resource.get_data()
                return resource.get_data().upper()
    """

    @abstractmethod
    def apply(self, resource: Resource) -> bytes:
        """
        Compute the new content of a resource.

        Implementations must not modify the resource's content themselves;
        the caller writes the returned bytes back.

        Args:
            resource: Resource to process

        Returns:
            Content after this stage
        """
        pass

    @property
    def processor_name(self) -> str:
        """Return processor name (default: class name)."""
        return self.__class__.__name__


class IdentityProcessor(ResourceProcessor):
    """Returns the content unchanged."""

    def apply(self, resource: Resource) -> bytes:
        return resource.get_data()


class TitleFillProcessor(ResourceProcessor):
    """Fills in the title of markup resources; the content is unchanged."""

    def __init__(self,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 log: Optional[logging.Logger] = None,
                 prefix_size: int = DEFAULT_PREFIX_SIZE):
        self.chunk_size = chunk_size
        self.prefix_size = prefix_size
        self.log = log or logger

    @classmethod
    def from_config(cls, config: ResourceConfig, **kwargs) -> 'TitleFillProcessor':
        return cls(config.title_scan_chunk_size, prefix_size=config.encoding_prefix_size, **kwargs)

    def apply(self, resource: Resource) -> bytes:
        title = find_title(resource, self.chunk_size, log=self.log, prefix_size=self.prefix_size)
        self.log.debug(f"Title of {resource.href}: {title!r}")
        return resource.get_data()


def _run_stages(resource: Resource,
                processors: Sequence[ResourceProcessor],
                stage_started: Optional[Callable[[ResourceProcessor], None]] = None) -> bool:
    if not processors:
        return False

    original_state = resource.content_state
    original_data = resource.get_data()
    try:
        # Stages read the in-memory copy instead of reloading from the store
        resource.set_data(original_data)
        for processor in processors:
            if stage_started is not None:
                stage_started(processor)
            resource.set_data(processor.apply(resource))
    except Exception:
        resource.restore(original_state)
        raise

    if resource.get_data() == original_data:
        # Unchanged content keeps its original (releasable) state
        resource.restore(original_state)
        return False
    return True


def apply_processors(resource: Resource, processors: Sequence[ResourceProcessor]) -> bool:
    """
    Run processors on one resource in order, writing each result back.

    If any stage fails the resource's original content is restored before
    the error is re-raised, so a failed resource is never left half
    processed. A resource whose content ends up unchanged keeps its original state,
    so lazy content stays in the store.

    Args:
        resource: Resource to process
        processors: Stages to run, in order

    Returns:
        True if the final content differs from the original
    """
    return _run_stages(resource, processors)


def process_resources(resources: Iterable[Resource],
                      processors: Sequence[ResourceProcessor],
                      log: Optional[logging.Logger] = None) -> ProcessResult:
    """
    Run processors over many resources.

    A failure aborts processing of that resource only: its content is
    restored, the error is recorded in the result and the next resource is
    processed.

    Args:
        resources: Resources to process
        processors: Stages to run on each resource, in order
        log: Logger for diagnostics (defaults to the module logger)

    Returns:
        ProcessResult with processing outcome
    """
    log = log or logger
    result = ProcessResult()
    current: List[str] = [""]

    def stage_started(processor: ResourceProcessor) -> None:
        current[0] = processor.processor_name

    for resource in resources:
        current[0] = "load"
        try:
            changed = _run_stages(resource, processors, stage_started)
        except (EpubCoreError, OSError) as e:
            result.add_error(resource.href, current[0], str(e))
            log.error(f"{current[0]} failed on {resource.href}: {e}", exc_info=True)
            continue

        result.resources_processed += 1
        if changed:
            result.resources_changed += 1

    result.metadata['processors'] = [p.processor_name for p in processors]
    log.info(
        f"Processed {result.resources_processed} resources "
        f"({result.resources_changed} changed, {result.resources_failed} failed)"
    )
    return result
