import pytest

from tests.factories import StubCatalog, make_video
from tubefilter.core.exceptions import UpstreamError
from tubefilter.models.schemas import AffinityProfile, Identity
from tubefilter.services.recommendations import RecommendationEngine


def videos(prefix, count, channel_id):
    return [make_video(f"{prefix}{n}", channel_id=channel_id) for n in range(count)]


async def seed_user(repository, name="alice"):
    user = await repository.create_user(name)
    return Identity(user_id=user.id, username=user.username)


async def watch(repository, identity, video):
    await repository.save_video(video)
    await repository.add_watch_history(identity.user_id, video.id)


class TestAffinityProfile:
    @pytest.mark.asyncio
    async def test_weights_from_history_and_likes(self, repository, settings):
        identity = await seed_user(repository)
        a1 = make_video("a1", channel_id="chan_a")
        b1 = make_video("b1", channel_id="chan_b")
        await watch(repository, identity, a1)
        await watch(repository, identity, a1)
        await watch(repository, identity, b1)
        await repository.upsert_interaction(identity.user_id, "a1", "like")

        engine = RecommendationEngine(repository, StubCatalog(), settings)
        profile = await engine.build_profile(identity.user_id)

        assert profile.weights == {"chan_a": 5, "chan_b": 1}
        assert profile.watched_ids == {"a1", "b1"}

    @pytest.mark.asyncio
    async def test_uncached_videos_add_no_weight(self, repository, settings):
        identity = await seed_user(repository)
        await repository.add_watch_history(identity.user_id, "gone")
        await repository.upsert_interaction(identity.user_id, "gone", "like")

        engine = RecommendationEngine(repository, StubCatalog(), settings)
        profile = await engine.build_profile(identity.user_id)

        assert profile.is_cold_start
        assert profile.watched_ids == {"gone"}

    @pytest.mark.asyncio
    async def test_other_interaction_types_ignored(self, repository, settings):
        identity = await seed_user(repository)
        await repository.save_video(make_video("s1", channel_id="chan_s"))
        await repository.upsert_interaction(identity.user_id, "s1", "save")

        engine = RecommendationEngine(repository, StubCatalog(), settings)
        profile = await engine.build_profile(identity.user_id)

        assert profile.weights == {}

    def test_top_channels_ties_keep_first_seen(self, repository, settings):
        engine = RecommendationEngine(repository, StubCatalog(), settings)
        profile = AffinityProfile(weights={"x": 1, "y": 3, "z": 1, "w": 1})

        assert engine.top_channels(profile) == ["y", "x", "z"]


class TestRecommend:
    @pytest.mark.asyncio
    async def test_anonymous_gets_trending(self, repository, settings):
        trending = videos("t", 5, "chan_t")
        catalog = StubCatalog(trending=trending)
        engine = RecommendationEngine(repository, catalog, settings)

        assert await engine.recommend(None) == trending
        assert catalog.channel_calls == []

    @pytest.mark.asyncio
    async def test_cold_start_is_trending_backfill(self, repository, settings):
        identity = await seed_user(repository)
        catalog = StubCatalog(trending=videos("t", 40, "chan_t"))
        engine = RecommendationEngine(repository, catalog, settings)

        result = await engine.recommend(identity)

        assert catalog.channel_calls == []
        assert catalog.trending_calls == [30]
        assert [v.id for v in result] == [f"t{n}" for n in range(30)]

    @pytest.mark.asyncio
    async def test_cold_start_skips_channel_fan_out(self, repository, settings, caplog):
        identity = await seed_user(repository)
        await repository.add_watch_history(identity.user_id, "t0")
        catalog = StubCatalog(trending=videos("t", 5, "chan_t"))
        engine = RecommendationEngine(repository, catalog, settings)

        with caplog.at_level("INFO", logger="tubefilter.services.recommendations"):
            result = await engine.recommend(identity)

        assert catalog.channel_calls == []
        assert [v.id for v in result] == ["t1", "t2", "t3", "t4"]
        assert "Cold start" in caplog.text

    @pytest.mark.asyncio
    async def test_top_channels_fetched_and_watched_excluded(self, repository, settings):
        identity = await seed_user(repository)
        channel_videos = videos("a", 10, "chan_a")
        await watch(repository, identity, channel_videos[0])
        catalog = StubCatalog(
            channels={"chan_a": channel_videos},
            trending=videos("t", 40, "chan_t"),
        )
        engine = RecommendationEngine(repository, catalog, settings)

        result = await engine.recommend(identity)
        ids = [v.id for v in result]

        assert catalog.channel_calls == ["chan_a"]
        assert "a0" not in ids
        assert ids[:9] == [f"a{n}" for n in range(1, 10)]
        assert catalog.trending_calls == [30 - 9]

    @pytest.mark.asyncio
    async def test_only_top_three_channels(self, repository, settings):
        identity = await seed_user(repository)
        for channel in ("c1", "c2", "c3", "c4"):
            await watch(repository, identity, make_video(f"seed_{channel}", channel_id=channel))
        await repository.upsert_interaction(identity.user_id, "seed_c4", "like")
        catalog = StubCatalog(trending=videos("t", 40, "chan_t"))
        engine = RecommendationEngine(repository, catalog, settings)

        await engine.recommend(identity)

        assert len(catalog.channel_calls) == 3
        assert catalog.channel_calls[0] == "c4"

    @pytest.mark.asyncio
    async def test_no_backfill_when_enough(self, repository, settings):
        identity = await seed_user(repository)
        await watch(repository, identity, make_video("seed_a", channel_id="chan_a"))
        await watch(repository, identity, make_video("seed_b", channel_id="chan_b"))
        catalog = StubCatalog(
            channels={"chan_a": videos("a", 10, "chan_a"), "chan_b": videos("b", 10, "chan_b")},
        )
        engine = RecommendationEngine(repository, catalog, settings)

        result = await engine.recommend(identity)

        assert len(result) == 20
        assert catalog.trending_calls == []

    @pytest.mark.asyncio
    async def test_failing_channel_skipped(self, repository, settings):
        identity = await seed_user(repository)
        await watch(repository, identity, make_video("seed_a", channel_id="chan_a"))
        await watch(repository, identity, make_video("seed_b", channel_id="chan_b"))
        catalog = StubCatalog(
            channels={"chan_b": videos("b", 5, "chan_b")},
            failing_channels=["chan_a"],
            trending=videos("t", 40, "chan_t"),
        )
        engine = RecommendationEngine(repository, catalog, settings)

        result = await engine.recommend(identity)
        ids = [v.id for v in result]

        assert sorted(catalog.channel_calls) == ["chan_a", "chan_b"]
        assert ids[:5] == [f"b{n}" for n in range(5)]
        assert len(ids) == 5 + 25

    @pytest.mark.asyncio
    async def test_backfill_deduplicates(self, repository, settings):
        identity = await seed_user(repository)
        shared = make_video("shared", channel_id="chan_a")
        watched = make_video("watched", channel_id="chan_a")
        await watch(repository, identity, watched)
        catalog = StubCatalog(
            channels={"chan_a": [shared, watched]},
            trending=[shared, watched, make_video("fresh", channel_id="chan_t")],
        )
        engine = RecommendationEngine(repository, catalog, settings)

        result = await engine.recommend(identity)

        assert [v.id for v in result] == ["shared", "fresh"]

    @pytest.mark.asyncio
    async def test_cross_channel_duplicate_first_wins(self, repository, settings):
        identity = await seed_user(repository)
        await watch(repository, identity, make_video("seed_a", channel_id="chan_a"))
        await repository.upsert_interaction(identity.user_id, "seed_a", "like")
        await watch(repository, identity, make_video("seed_b", channel_id="chan_b"))
        collab = make_video("collab", channel_id="chan_a")
        catalog = StubCatalog(
            channels={"chan_a": [collab], "chan_b": [collab, make_video("b1", channel_id="chan_b")]},
        )
        engine = RecommendationEngine(repository, catalog, settings)

        result = await engine.recommend(identity)

        assert [v.id for v in result] == ["collab", "b1"]

    @pytest.mark.asyncio
    async def test_backfill_failure_propagates(self, repository, settings):
        identity = await seed_user(repository)
        catalog = StubCatalog(fail_trending=True)
        engine = RecommendationEngine(repository, catalog, settings)

        with pytest.raises(UpstreamError):
            await engine.recommend(identity)
