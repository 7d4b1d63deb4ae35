"""Export and import sessions: one archive's worth of definitions and records."""

from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Iterator

from .archive.base import BaseArchiveWriter
from .archive.loader import ArchiveRecord, LoadedArchive
from .config import DisplayConfig
from .errors import UnknownMetricError
from .instances import InstanceDomainManager
from .marshal.define import MetricDefiner
from .marshal.reader import GROUP_OWNERS, ReadDispatcher, ReadOutcome
from .marshal.writer import WriteMarshaller
from .metrics.identity import format_id
from .metrics.registry import MetricRegistry
from .sample.activity import Activity, ActivityId, build_activities
from .sample.records import FileHeader, RecordHeader

logger = logging.getLogger(__name__)


class ExportSession:
    """Writes successive samples of *activities* to one archive.

    Metrics and instances are defined from the first sample; the file header
    goes into the first record only.
    """

    def __init__(
        self,
        registry: MetricRegistry,
        activities: dict[ActivityId, Activity],
        archive: BaseArchiveWriter,
        display: DisplayConfig | None = None,
    ) -> None:
        registry.reset_state()
        self.registry = registry
        self.activities = activities
        self.archive = archive
        self.instances = InstanceDomainManager()
        self.definer = MetricDefiner(registry, self.instances, archive, display)
        self.writer = WriteMarshaller(self.definer)
        self.records_written = 0
        logger.info(
            "Export session started (%s)", ", ".join(a.name for a in activities.values())
        )

    def write_sample(
        self,
        curr: int,
        file_header: FileHeader,
        record_header: RecordHeader,
        timestamp: float | None = None,
    ) -> int:
        """Write slot *curr* of every activity as one record. Returns the value count."""
        if self.records_written == 0:
            self.definer.define_all(self.activities.values(), curr)
            self.writer.write_file_header(file_header)
        self.writer.write_record_header(record_header)
        for activity in self.activities.values():
            self.writer.write_activity(activity, curr)
        count = self.archive.write(time.time() if timestamp is None else timestamp)
        self.records_written += 1
        logger.debug("Record %d: %d values", self.records_written, count)
        return count

    def close(self) -> None:
        self.archive.shutdown()
        logger.info("Export session finished: %d records", self.records_written)


def archive_activities(registry: MetricRegistry, archive: LoadedArchive) -> list[ActivityId]:
    """Activities owning at least one metric defined in *archive*, in activity order."""
    found: set[ActivityId] = set()
    for pmid in archive.metrics:
        try:
            owner = GROUP_OWNERS.get(registry.owner_of(pmid))
        except UnknownMetricError:
            continue
        if isinstance(owner, ActivityId):
            found.add(owner)
    return sorted(found)


class ImportSession:
    """Replays a loaded archive into activity buffers.

    Instances come from the archive's instance definitions; descriptors that
    differ from the registry are reported but do not stop the import.
    """

    def __init__(
        self,
        registry: MetricRegistry,
        archive: LoadedArchive,
        activities: dict[ActivityId, Activity] | None = None,
    ) -> None:
        self.registry = registry
        self.archive = archive
        self.instances = InstanceDomainManager()
        for indom, name, inst in archive.instances:
            self.instances.declare_instance(indom, name, inst)
        self.mismatches = self._check_descriptors()
        if activities is None:
            activities = build_activities(archive_activities(registry, archive))
        self.activities = activities
        self.file_header = FileHeader()
        self.record_header = RecordHeader()
        self.dispatcher = ReadDispatcher(
            registry, activities, self.instances, self.file_header, self.record_header
        )

    def _check_descriptors(self) -> int:
        mismatches = 0
        for pmid, desc in self.archive.metrics.items():
            try:
                known = self.registry.lookup_by_identity(pmid)
            except UnknownMetricError:
                logger.warning("Archive metric %s (%s) is not registered", desc.name, format_id(pmid))
                mismatches += 1
                continue
            if known != desc:
                logger.warning("Archive descriptor for %s differs from the registry", desc.name)
                mismatches += 1
        return mismatches

    def replay(self) -> Iterator[tuple[ArchiveRecord, int, Counter[ReadOutcome]]]:
        """Dispatch every record, alternating buffer slots.

        Yields ``(record, slot, outcome counts)`` after each record, while
        the slot still holds that record's values.
        """
        curr = 0
        for record in self.archive.records:
            self.dispatcher.begin_record()
            outcomes: Counter[ReadOutcome] = Counter()
            for value_set in record.value_sets:
                if value_set.pmid not in self.dispatcher.routes:
                    continue
                outcomes[self.dispatcher.dispatch(value_set, curr)] += 1
            yield record, curr, outcomes
            curr ^= 1
