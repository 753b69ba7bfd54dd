
from .stamp import (
    PointerPositionRequest,
    SessionRequest,
    StampCommitRequest,
    StampSpec,
    StampUpdateRequest,
)

__all__ = [
    "PointerPositionRequest",
    "SessionRequest",
    "StampCommitRequest",
    "StampSpec",
    "StampUpdateRequest",
]
