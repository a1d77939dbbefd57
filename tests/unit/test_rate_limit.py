from okta_admin.core.okta import RateLimit, RateLimitCategory, RateLimitTracker


def test_from_headers_parses_values():
    rl = RateLimit.from_headers({
        "X-Rate-Limit-Limit": "600",
        "X-Rate-Limit-Remaining": "12",
        "X-Rate-Limit-Reset": "1700000000",
    })

    assert rl == RateLimit(limit=600, remaining=12, reset=1700000000)
    assert rl.is_known


def test_from_headers_ignores_garbage():
    rl = RateLimit.from_headers({"X-Rate-Limit-Remaining": "lots"})

    assert rl == RateLimit()
    assert not rl.is_known


def test_seconds_until_reset_never_negative():
    rl = RateLimit(limit=10, remaining=0, reset=100)

    assert rl.seconds_until_reset(now=90) == 10
    assert rl.seconds_until_reset(now=200) == 0


class TestTracker:
    def test_unknown_snapshots_are_not_stored(self):
        tracker = RateLimitTracker()
        tracker.update(RateLimitCategory.CORE, RateLimit())

        assert tracker.get(RateLimitCategory.CORE) is None

    def test_wait_only_when_bucket_is_empty(self):
        tracker = RateLimitTracker()
        tracker.update(RateLimitCategory.CORE, RateLimit(limit=10, remaining=1, reset=160))
        tracker.update(RateLimitCategory.USERS_GET_BY_ID, RateLimit(limit=10, remaining=0, reset=160))

        assert tracker.wait_time(RateLimitCategory.CORE, now=100) == 0
        assert tracker.wait_time(RateLimitCategory.USERS_GET_BY_ID, now=100) == 60
        assert tracker.wait_time(RateLimitCategory.GROUPS_CREATE_LIST, now=100) == 0

    def test_latest_snapshot_wins(self):
        tracker = RateLimitTracker()
        tracker.update(RateLimitCategory.CORE, RateLimit(limit=10, remaining=0, reset=160))
        tracker.update(RateLimitCategory.CORE, RateLimit(limit=10, remaining=9, reset=220))

        assert tracker.wait_time(RateLimitCategory.CORE, now=100) == 0
