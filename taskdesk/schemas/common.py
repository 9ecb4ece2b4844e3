from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator


def _as_utc(value: datetime) -> datetime:
    # Stored timestamps are naive UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Serialised with a "Z" suffix so clients never read it as local time
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]
