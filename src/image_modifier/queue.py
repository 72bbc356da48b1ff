from __future__ import annotations

from collections.abc import Iterator

from loguru import logger

from image_modifier.container_models import Dimensions, Operation


class OperationQueue:
    """
    Append-only, ordered sequence of validated operations.

    The queue tracks the *running* dimensions: the dimensions of the image after
    every queued operation has been applied. Insertion order is execution order;
    entries are never removed, reordered or merged.
    """

    def __init__(self, dimensions: Dimensions) -> None:
        self._dimensions = dimensions
        self._operations: list[Operation] = []

    @property
    def dimensions(self) -> Dimensions:
        return self._dimensions

    def enqueue(self, operation: Operation) -> None:
        """
        Append an operation and update the running dimensions.

        :param operation: A resolved operation with an effect on the image.
        """
        dimensions = operation.resulting_dimensions(self._dimensions)
        self._operations.append(operation)
        logger.info(
            f"Queued {operation.kind} #{len(self._operations)}: "
            f"{self._dimensions} -> {dimensions}"
        )
        self._dimensions = dimensions

    def copy(self) -> OperationQueue:
        """Independent queue holding the same (immutable) operation records."""
        queue = OperationQueue(self._dimensions)
        queue._operations = list(self._operations)
        return queue

    def __iter__(self) -> Iterator[Operation]:
        return iter(tuple(self._operations))

    def __len__(self) -> int:
        return len(self._operations)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dimensions={self._dimensions}, operations={self._operations!r})"
