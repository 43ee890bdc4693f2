import logging
from collections.abc import Iterable
from enum import Enum

from .models import Partition, QueryDescriptor

logger = logging.getLogger(__name__)

MAX_WORKERS = 50


class AssignmentStrategy(str, Enum):
    ROUND_ROBIN = "round-robin"
    LEAST_LOADED = "least-loaded"


class Partitioner:
    """
    Routes descriptors to worker slots with host affinity.

    ROUND_ROBIN hands each newly seen host the slot under a cursor that wraps
    at ``worker_count``; once there are more distinct hosts than slots, later
    hosts pile onto slots from 0 again regardless of how busy they are.
    LEAST_LOADED gives a new host the slot with the fewest descriptors so far
    (lowest index on ties).
    """

    def __init__(
        self,
        worker_count: int,
        strategy: AssignmentStrategy = AssignmentStrategy.ROUND_ROBIN,
    ) -> None:
        if not 1 <= worker_count <= MAX_WORKERS:
            raise ValueError(
                f"worker_count must be between 1 and {MAX_WORKERS}, got {worker_count}"
            )
        self.worker_count = worker_count
        self.strategy = AssignmentStrategy(strategy)
        self._slots: list[list[QueryDescriptor]] = [[] for _ in range(worker_count)]
        self._host_slots: dict[str, int] = {}
        self._cursor = 0

    def _assign_slot(self) -> int:
        if self.strategy is AssignmentStrategy.LEAST_LOADED:
            return min(range(self.worker_count), key=lambda i: len(self._slots[i]))
        slot = self._cursor
        self._cursor = (self._cursor + 1) % self.worker_count
        return slot

    def add(self, descriptor: QueryDescriptor) -> int:
        slot = self._host_slots.get(descriptor.host)
        if slot is None:
            slot = self._assign_slot()
            self._host_slots[descriptor.host] = slot
        self._slots[slot].append(descriptor)
        logger.debug(
            f"adding to slot {slot}: {descriptor.host}, "
            f"{descriptor.start_time}, {descriptor.end_time}"
        )
        return slot

    def partitions(self) -> list[Partition]:
        """Non-empty slots in slot order, renumbered 0..K-1."""
        non_empty = [s for s in self._slots if s]
        return [Partition(slot=i, descriptors=tuple(s)) for i, s in enumerate(non_empty)]


def partition(
    descriptors: Iterable[QueryDescriptor],
    worker_count: int,
    strategy: AssignmentStrategy = AssignmentStrategy.ROUND_ROBIN,
) -> list[Partition]:
    partitioner = Partitioner(worker_count, strategy)
    for d in descriptors:
        partitioner.add(d)
    parts = partitioner.partitions()
    logger.info(
        f"Partitioned {sum(len(p) for p in parts)} queries into {len(parts)} "
        f"of {worker_count} requested slots ({partitioner.strategy.value})"
    )
    return parts
