import json

import httplib2
import pytest
from googleapiclient.errors import HttpError

from djemini.errors import QuotaExceeded, TransientError, Unauthenticated
from djemini.providers.youtube.api_manager import (
    YouTubeApiManager,
    _classify_http_error,
)


def http_error(status: int, reason: str = "", message: str = "") -> HttpError:
    body = {"error": {"code": status, "message": message or reason}}
    if reason:
        body["error"]["errors"] = [{"reason": reason, "message": message or reason}]
    resp = httplib2.Response({"status": status})
    resp.reason = reason or "error"
    return HttpError(resp, json.dumps(body).encode("utf-8"))


class Script:
    """Callable that raises/returns the scripted outcomes in order."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def manager(**kw):
    sleeps = []
    kw.setdefault("max_retries", 3)
    kw.setdefault("backoff_base_sec", 1.0)
    kw.setdefault("sleep_sec", 0)
    return YouTubeApiManager(sleep=sleeps.append, **kw), sleeps


@pytest.mark.parametrize(
    "err, write, kind",
    [
        (http_error(403, "quotaExceeded"), False, "quota"),
        (http_error(403, "dailyLimitExceeded"), False, "quota"),
        (http_error(400, "badRequest", "The request cannot be completed because you have exceeded your quota."), False, "quota"),
        (http_error(403, "forbidden"), True, "quota"),
        (http_error(403, "forbidden"), False, "other"),
        (http_error(401, "authError"), False, "auth"),
        (http_error(503, "backendError"), False, "transient"),
        (http_error(429, "tooManyRequests"), False, "transient"),
        (http_error(404, "playlistNotFound"), False, "other"),
    ],
)
def test_classify_http_error(err, write, kind):
    assert _classify_http_error(err, write=write) == kind


def test_success_returns_result():
    api, sleeps = manager(sleep_sec=0.2)
    assert api.execute_with_retry(Script({"ok": 1}), "read") == {"ok": 1}
    assert sleeps == [0.2]


def test_transient_read_is_retried_with_backoff():
    api, sleeps = manager()
    op = Script(http_error(503, "backendError"), http_error(500, "backendError"), "done")

    assert api.execute_with_retry(op, "read") == "done"
    assert op.calls == 3
    assert sleeps == [1.0, 2.0]


def test_transient_read_gives_up_after_max_retries():
    api, sleeps = manager(max_retries=2)
    op = Script(http_error(503, "backendError"), http_error(503, "backendError"))

    with pytest.raises(TransientError) as ei:
        api.execute_with_retry(op, "read")
    assert ei.value.status == 503
    assert op.calls == 2


def test_transport_errors_are_retried():
    api, _ = manager()
    op = Script(ConnectionResetError("reset"), "done")
    assert api.execute_with_retry(op, "read") == "done"


def test_writes_are_attempted_once():
    api, _ = manager()
    op = Script(http_error(503, "backendError"), "never")

    with pytest.raises(TransientError):
        api.execute_with_retry(op, "insert", write=True)
    assert op.calls == 1


def test_quota_trips_the_wire():
    api, _ = manager()

    with pytest.raises(QuotaExceeded):
        api.execute_with_retry(Script(http_error(403, "quotaExceeded")), "read")
    assert api.quota_exhausted

    untouched = Script("never")
    with pytest.raises(QuotaExceeded):
        api.execute_with_retry(untouched, "read")
    assert untouched.calls == 0


def test_tripwire_is_per_instance():
    first, _ = manager()
    first.mark_quota_exhausted()

    second, _ = manager()
    assert second.execute_with_retry(Script("ok"), "read") == "ok"


def test_auth_error_is_not_retried():
    api, _ = manager()
    op = Script(http_error(401, "authError"), "never")

    with pytest.raises(Unauthenticated):
        api.execute_with_retry(op, "read")
    assert op.calls == 1


def test_other_status_fails_immediately():
    api, _ = manager()
    op = Script(http_error(404, "playlistNotFound"), "never")

    with pytest.raises(TransientError) as ei:
        api.execute_with_retry(op, "read")
    assert ei.value.status == 404
    assert op.calls == 1
