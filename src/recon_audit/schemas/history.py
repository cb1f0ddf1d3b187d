"""Append-only status history log for inspection cases."""

from typing import Iterator, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, RootModel

from .enums import PostReviewStatus, TransitionType


class StatusHistoryEntry(BaseModel):
    """One recorded status change.

    Serialized with the keys ``from``/``to`` (aliases) to match the stored
    record shape.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_status: PostReviewStatus = Field(..., alias="from", description="Status before the change")
    to_status: PostReviewStatus = Field(..., alias="to", description="Status after the change")
    timestamp: int = Field(..., description="Epoch milliseconds when the change was recorded")
    type: TransitionType = Field(..., description="Upgrade, Downgrade or Lateral")


class StatusHistory(RootModel[Tuple[StatusHistoryEntry, ...]]):
    """Immutable, ordered log of status changes.

    ``append`` is the only way to grow the log and it returns a new
    instance; existing entries are never reordered or replaced.
    """

    model_config = ConfigDict(frozen=True)

    root: Tuple[StatusHistoryEntry, ...] = ()

    @classmethod
    def empty(cls) -> "StatusHistory":
        return cls(())

    def append(self, entry: StatusHistoryEntry) -> "StatusHistory":
        return StatusHistory(self.root + (entry,))

    @property
    def last(self) -> Optional[StatusHistoryEntry]:
        return self.root[-1] if self.root else None

    def __iter__(self) -> Iterator[StatusHistoryEntry]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> StatusHistoryEntry:
        return self.root[index]
