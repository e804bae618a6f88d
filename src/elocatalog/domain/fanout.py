"""Query several archives at once, each bounded by its own deadline."""

from __future__ import annotations

import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from elocatalog.domain.errors import UpstreamError, UpstreamTimeoutError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from elocatalog.domain.model import ExternalRecord, Source
    from elocatalog.domain.ports import GameFetcher

log = getLogger(__name__)


@dataclass(slots=True)
class FanOutResult:
    records: list[ExternalRecord] = field(default_factory=list["ExternalRecord"])
    warnings: dict[Source, str] = field(default_factory=dict["Source", str])
    fetched: dict[Source, int] = field(default_factory=dict["Source", int])


def fetch_all(
    requests: Mapping[Source, tuple[GameFetcher, str]],
    *,
    limit: int,
    deadlines: Mapping[Source, float],
    default_deadline: float,
) -> FanOutResult:
    """Run every ``(fetcher, account)`` pair concurrently.

    A source that raises ``UpstreamError`` or misses its deadline contributes a
    warning instead of records; the other sources are unaffected. Workers that
    overrun are abandoned, not joined, but the interpreter still joins them at
    exit, so a short-lived process lingers until each fetcher's own HTTP
    timeout ends its request.
    """

    result = FanOutResult()
    if not requests:
        return result

    started = time.monotonic()
    executor = ThreadPoolExecutor(max_workers=len(requests), thread_name_prefix="fetch")
    try:
        futures: dict[Source, Future[list[ExternalRecord]]] = {
            source: executor.submit(fetcher, account=account, limit=limit)
            for source, (fetcher, account) in requests.items()
        }
        for source, future in futures.items():
            deadline = deadlines.get(source, default_deadline)
            remaining = max(0.0, started + deadline - time.monotonic())
            try:
                records = future.result(timeout=remaining)
            except TimeoutError:
                future.cancel()
                error = UpstreamTimeoutError(
                    f"{source} did not answer within {deadline:g}s", source=source
                )
                log.warning("Skipping %s: %s", source, error)
                result.warnings[source] = str(error)
                continue
            except UpstreamError as exc:
                log.warning("Skipping %s: %s", source, exc)
                result.warnings[source] = str(exc)
                continue
            result.records.extend(records)
            result.fetched[source] = len(records)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    log.info(
        "Fetched %s records from %s source(s), %s warning(s)",
        len(result.records),
        len(result.fetched),
        len(result.warnings),
    )
    return result
