from typing import Protocol, Self, runtime_checkable

from orm_doctor.domain import QueryTrace


@runtime_checkable
class TraceInput(Protocol):
    """Protocol for async sources of finalized query traces."""

    def __aiter__(self) -> Self:
        ...

    async def __anext__(self) -> QueryTrace:
        ...
