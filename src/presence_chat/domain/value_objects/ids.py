from __future__ import annotations

from typing import NewType

MessageId = NewType("MessageId", str)
ConnectionHandle = NewType("ConnectionHandle", str)
