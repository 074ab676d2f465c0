"""Tests for the link service."""

import asyncio
from datetime import timedelta

import pytest

from linkmon.database.models import CheckStatus, utc_now
from linkmon.errors import ConflictError, InternalError, NotFoundError, ValidationError
from linkmon.prober import Verdict
from linkmon.service import LinkService
from linkmon.shortcode import ShortCodeGenerator


class RepeatingGenerator(ShortCodeGenerator):
    """Hands out a fixed sequence of codes, then a fixed UUID fallback."""

    def __init__(self, codes, fallback="fallbk01"):
        super().__init__()
        self.codes = list(codes)
        self.fallback = fallback

    def generate_random(self, length=None):
        return self.codes.pop(0) if self.codes else "taken1"

    def generate_from_uuid(self, length=None):
        return self.fallback


@pytest.mark.asyncio
class TestCreateLink:
    """Link creation."""

    async def test_create_with_generated_code(self, service, sample_urls):
        link = await service.create_link(sample_urls[0])

        assert link.target_url == sample_urls[0]
        assert len(link.short_code) == 6
        assert link.total_clicks == 0
        assert link.last_clicked is None
        assert link.created_at is not None

    async def test_create_with_custom_code(self, service, sample_urls):
        link = await service.create_link(sample_urls[0], custom_code="my-link")

        assert link.short_code == "my-link"
        assert (await service.get_link("my-link")).id == link.id

    async def test_duplicate_custom_code_conflicts(self, service, store, sample_urls):
        """A second create with the same code fails and leaves the first intact."""
        first = await service.create_link(sample_urls[0], custom_code="taken")

        with pytest.raises(ConflictError):
            await service.create_link(sample_urls[1], custom_code="taken")

        stored = await store.get_link("taken")
        assert stored.id == first.id
        assert stored.target_url == sample_urls[0]

    @pytest.mark.parametrize("target", [None, ""])
    async def test_missing_target_url(self, service, target):
        with pytest.raises(ValidationError) as exc_info:
            await service.create_link(target)

        assert exc_info.value.status_code == 400
        assert "required" in exc_info.value.message.lower()

    @pytest.mark.parametrize("target", ["not-a-url", "ftp://example.com", "https://", "https://" + "a" * 2100])
    async def test_invalid_target_url(self, service, target):
        with pytest.raises(ValidationError):
            await service.create_link(target)

    @pytest.mark.parametrize("code", ["ab", "has space", "api", "x" * 21])
    async def test_invalid_custom_code(self, service, store, sample_urls, code):
        with pytest.raises(ValidationError):
            await service.create_link(sample_urls[0], custom_code=code)

        assert (await store.list_links()).total == 0

    async def test_generated_code_retries_on_collision(self, store, recorder, logger, sample_urls):
        await store.create_link("taken1", sample_urls[0])
        service = LinkService(
            store, recorder, short_code_generator=RepeatingGenerator(["taken1", "taken1", "fresh1"]), logger=logger
        )

        link = await service.create_link(sample_urls[1])

        assert link.short_code == "fresh1"

    async def test_generated_code_falls_back_to_uuid(self, store, recorder, logger, sample_urls):
        await store.create_link("taken1", sample_urls[0])
        service = LinkService(
            store, recorder, short_code_generator=RepeatingGenerator([]), logger=logger, max_collision_retries=3
        )

        link = await service.create_link(sample_urls[1])

        assert link.short_code == "fallbk01"

    async def test_generated_code_gives_up(self, store, recorder, logger, sample_urls):
        await store.create_link("taken1", sample_urls[0])
        await store.create_link("fallbk01", sample_urls[0])
        service = LinkService(
            store, recorder, short_code_generator=RepeatingGenerator([]), logger=logger, max_collision_retries=2
        )

        with pytest.raises(InternalError):
            await service.create_link(sample_urls[1])


@pytest.mark.asyncio
class TestListLinks:
    """Paging and search."""

    async def test_pagination(self, service, store):
        base = utc_now()
        for i in range(25):
            await store.create_link(f"code{i:02d}", f"https://example.com/{i}", created_at=base + timedelta(seconds=i))

        page = await service.list_links(page=1, limit=10)
        assert page.total == 25
        assert page.total_pages == 3
        assert page.has_next and not page.has_prev
        assert [link.short_code for link in page.items][:2] == ["code24", "code23"]

        last = await service.list_links(page=3, limit=10)
        assert len(last.items) == 5
        assert not last.has_next and last.has_prev
        assert last.items[-1].short_code == "code00"

        beyond = await service.list_links(page=4, limit=10)
        assert beyond.items == []
        assert beyond.total == 25

    async def test_search_matches_code_or_url(self, service):
        await service.create_link("https://github.com/user/repo", custom_code="gh-repo")
        await service.create_link("https://example.com/GitHub-mirror", custom_code="mirror")
        await service.create_link("https://example.com/other", custom_code="other")

        page = await service.list_links(search="  GITHUB ")
        assert page.total == 2
        assert {link.short_code for link in page.items} == {"gh-repo", "mirror"}

        page = await service.list_links(search="mirr")
        assert [link.short_code for link in page.items] == ["mirror"]

    async def test_blank_search_lists_all(self, service, sample_urls):
        for url in sample_urls:
            await service.create_link(url)

        assert (await service.list_links(search="   ")).total == len(sample_urls)

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (1, 101), (-1, 5)])
    async def test_invalid_paging(self, service, page, limit):
        with pytest.raises(ValidationError):
            await service.list_links(page=page, limit=limit)


@pytest.mark.asyncio
class TestRedirect:
    """Click accounting."""

    async def test_each_redirect_counts(self, service, store, sample_urls):
        created = await service.create_link(sample_urls[0], custom_code="clicks")

        for expected in range(1, 4):
            link = await service.resolve_redirect("clicks")
            assert link.target_url == sample_urls[0]
            assert link.total_clicks == expected

        link = await service.get_link("clicks")
        clicks = await store.list_clicks(created.id)
        assert link.total_clicks == 3
        assert len(clicks) == 3
        assert link.last_clicked == clicks[-1].created_at
        assert [c.created_at for c in clicks] == sorted(c.created_at for c in clicks)

    async def test_unknown_code(self, service):
        with pytest.raises(NotFoundError):
            await service.resolve_redirect("nope1")

    async def test_concurrent_redirects_lose_no_clicks(self, service, store, sample_urls):
        """N concurrent redirects give a counter of N and N click rows."""
        created = await service.create_link(sample_urls[0], custom_code="busy")
        n = 100

        results = await asyncio.gather(*(service.resolve_redirect("busy") for _ in range(n)))

        assert sorted(link.total_clicks for link in results) == list(range(1, n + 1))
        assert (await service.get_link("busy")).total_clicks == n
        assert len(await store.list_clicks(created.id)) == n


@pytest.mark.asyncio
class TestStats:
    """Stats request: fresh probe plus history."""

    async def test_stats_takes_fresh_sample(self, service, prober, sample_urls):
        await service.create_link(sample_urls[0], custom_code="stats1")
        await service.resolve_redirect("stats1")

        stats = await service.get_link_stats("stats1")

        assert prober.calls == [sample_urls[0]]
        assert len(stats.uptime_checks) == 1
        assert stats.uptime_checks[0].status == CheckStatus.UP
        assert stats.link.total_clicks == 1
        assert len(stats.clicks) == 1

        assert len(stats.daily_uptime) == 7
        assert stats.daily_uptime[-1].total_checks == 1
        assert stats.daily_uptime[-1].uptime_percentage == 100

    async def test_stats_down_target(self, service, prober, sample_urls):
        await service.create_link(sample_urls[1], custom_code="stats2")
        prober.verdicts[sample_urls[1]] = Verdict.DOWN

        stats = await service.get_link_stats("stats2")

        assert stats.uptime_checks[0].status == CheckStatus.DOWN
        assert stats.daily_uptime[-1].uptime_percentage == 0

    async def test_recent_checks_capped_but_report_uses_all(self, service, store, sample_urls):
        """Only 50 checks are returned; the daily totals count all of them."""
        link = await service.create_link(sample_urls[0], custom_code="history")
        now = utc_now()
        for i in range(60):
            await store.add_uptime_check(link.id, CheckStatus.DOWN, created_at=now - timedelta(microseconds=i + 1))

        stats = await service.get_link_stats("history")

        assert len(stats.uptime_checks) == 50
        created = [check.created_at for check in stats.uptime_checks]
        assert created == sorted(created, reverse=True)
        # the fresh UP sample is the newest
        assert stats.uptime_checks[0].status == CheckStatus.UP

        today = stats.daily_uptime[-1]
        assert today.total_checks == 61
        assert today.up_checks == 1
        assert today.uptime_percentage == 2

    async def test_stats_history_across_days(self, service, store, sample_urls):
        link = await service.create_link(sample_urls[0], custom_code="weekly")
        now = utc_now()
        await store.add_uptime_check(link.id, CheckStatus.UP, created_at=now - timedelta(days=3))
        await store.add_uptime_check(link.id, CheckStatus.DOWN, created_at=now - timedelta(days=3))
        await store.add_uptime_check(link.id, CheckStatus.UP, created_at=now - timedelta(days=10))

        stats = await service.get_link_stats("weekly")
        by_day = {bucket.day: bucket for bucket in stats.daily_uptime}

        three_back = by_day[now.date() - timedelta(days=3)]
        assert three_back.total_checks == 2
        assert three_back.uptime_percentage == 50
        assert sum(bucket.total_checks for bucket in stats.daily_uptime) == 3

    async def test_stats_unknown_code_does_not_probe(self, service, prober):
        with pytest.raises(NotFoundError):
            await service.get_link_stats("missing")

        assert prober.calls == []

    async def test_stats_to_dict(self, service, sample_urls):
        await service.create_link(sample_urls[0], custom_code="render")

        data = (await service.get_link_stats("render")).to_dict()

        assert data["shortCode"] == "render"
        assert data["targetUrl"] == sample_urls[0]
        assert set(data) >= {"clicks", "uptimeChecks", "dailyUptime", "totalClicks", "createdAt"}
        assert len(data["dailyUptime"]) == 7


@pytest.mark.asyncio
class TestDeleteLink:
    """Deletion cascades to history."""

    async def test_delete_removes_history(self, service, store, sample_urls):
        link = await service.create_link(sample_urls[0], custom_code="gone")
        await service.resolve_redirect("gone")
        await service.get_link_stats("gone")

        await service.delete_link("gone")

        assert await store.get_link("gone") is None
        assert await store.list_clicks(link.id) == []
        assert await store.list_uptime_checks(link.id) == []
        with pytest.raises(NotFoundError):
            await service.resolve_redirect("gone")

    async def test_delete_twice(self, service, sample_urls):
        await service.create_link(sample_urls[0], custom_code="once")
        await service.delete_link("once")

        with pytest.raises(NotFoundError):
            await service.delete_link("once")

    async def test_code_reusable_after_delete(self, service, sample_urls):
        old = await service.create_link(sample_urls[0], custom_code="again")
        await service.delete_link("again")

        new = await service.create_link(sample_urls[1], custom_code="again")

        assert new.id != old.id
        assert new.total_clicks == 0


@pytest.mark.asyncio
class TestHealth:

    async def test_health_check(self, service):
        health = await service.health_check()

        assert health["connected"] is True
        assert health["response_time_ms"] >= 0

    async def test_close_releases_prober(self, service, prober):
        await service.close()
        assert prober.closed
