from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

from config import GraderConfig
from logs import get_logger
from remote import RemoteScorer, RemoteScoringError, parse_remote_score
from scoring import classify_score, score

logger = get_logger(__name__)


@dataclass(frozen=True)
class Grade:
    percent: int
    score_class: int
    source: str
    bucket: float | None = None


class AnswerGrader:
    """Grades answers with an optional remote scorer and the local engine as fallback.

    The remote scorer is only consulted when one is injected and enabled in
    the config. Any failure on the remote side (exception, timeout or a reply
    without a score) falls back to the local engine, so ``grade`` never
    raises for collaborator errors.
    """

    def __init__(self, remote: RemoteScorer | None = None, config: GraderConfig | None = None):
        self.remote = remote
        self.config = config or GraderConfig()
        self._local: Callable[[str, str], float] = (
            lru_cache(maxsize=self.config.cache_size)(score) if self.config.cache_size else score
        )
        self._executor: ThreadPoolExecutor | None = None

    def __enter__(self) -> AnswerGrader:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def grade_local(self, reference: str, candidate: str) -> Grade:
        bucket = self._local(reference or "", candidate or "")
        percent = int(round(bucket * 100))
        return Grade(percent=percent, score_class=classify_score(percent), source="local", bucket=bucket)

    def grade(self, reference: str, candidate: str) -> Grade:
        if self.remote is not None and self.config.remote_enabled:
            percent = self._remote_percent(reference, candidate)
            if percent is not None:
                return Grade(percent=percent, score_class=classify_score(percent), source="remote")
        grade = self.grade_local(reference, candidate)
        logger.debug("local_score_used", percent=grade.percent, bucket=grade.bucket)
        return grade

    def _remote_percent(self, reference: str, candidate: str) -> int | None:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.remote_workers, thread_name_prefix="remote-score"
            )
        future = self._executor.submit(self.remote.evaluate, reference, candidate)
        try:
            reply = future.result(timeout=self.config.remote_timeout)
        except FutureTimeout:
            future.cancel()
            logger.warning("remote_score_timeout", timeout=self.config.remote_timeout)
            return None
        except RemoteScoringError as e:
            logger.warning("remote_score_unavailable", error=str(e))
            return None
        except Exception as e:
            logger.warning("remote_score_failed", error=str(e), error_type=type(e).__name__)
            return None

        value = parse_remote_score(reply)
        if value is None:
            logger.warning("remote_score_unparsable", reply=repr(reply)[:200])
            return None
        return min(max(value, 0), 100)
