import pytest

from tests.factories import make_video
from tubefilter.core.exceptions import NotFoundError
from tubefilter.models.schemas import Identity
from tubefilter.services.tracker import InteractionTracker


@pytest.fixture
def tracker(repository):
    return InteractionTracker(repository)


@pytest.fixture
def identity():
    return Identity(user_id=1, username="alice")


class TestWatchHistory:
    @pytest.mark.asyncio
    async def test_record_appends(self, tracker, identity):
        await tracker.record_watch(identity, "v1")
        await tracker.record_watch(identity, "v1", watch_duration=120, completed=True)

        history = await tracker.watch_history(identity)
        assert len(history) == 2
        assert history[0].watch_duration == 120

    @pytest.mark.asyncio
    async def test_join_with_cached_video(self, tracker, identity, repository):
        await repository.save_video(make_video("v1", title="Cached"))
        await tracker.record_watch(identity, "v1")
        await tracker.record_watch(identity, "v2")

        history = await tracker.watch_history(identity)

        assert history[0].video_id == "v2"
        assert "video" not in history[0].model_fields_set
        assert history[1].video.title == "Cached"

    @pytest.mark.asyncio
    async def test_limit(self, tracker, identity):
        for n in range(5):
            await tracker.record_watch(identity, f"v{n}")

        assert len(await tracker.watch_history(identity, limit=3)) == 3


class TestInteractions:
    @pytest.mark.asyncio
    async def test_toggle_is_idempotent(self, tracker, identity, ticking_clock):
        first = await tracker.toggle_interaction(identity, "v1", "like")
        second = await tracker.toggle_interaction(identity, "v1", "like")

        assert first.id == second.id
        assert second.created_at > first.created_at
        assert len(await tracker.interactions(identity)) == 1

    @pytest.mark.asyncio
    async def test_filter_by_type_and_video(self, tracker, identity):
        await tracker.toggle_interaction(identity, "v1", "like")
        await tracker.toggle_interaction(identity, "v2", "like")
        await tracker.toggle_interaction(identity, "v1", "save")

        likes = await tracker.interactions(identity, interaction_type="like")
        assert {i.video_id for i in likes} == {"v1", "v2"}

        v1_likes = await tracker.interactions(identity, interaction_type="like", video_id="v1")
        assert [(i.video_id, i.interaction_type) for i in v1_likes] == [("v1", "like")]

        on_v1 = await tracker.interactions(identity, video_id="v1")
        assert {i.interaction_type for i in on_v1} == {"like", "save"}

    @pytest.mark.asyncio
    async def test_remove(self, tracker, identity):
        await tracker.toggle_interaction(identity, "v1", "like")

        await tracker.remove_interaction(identity, "v1", "like")

        assert await tracker.interactions(identity) == []

    @pytest.mark.asyncio
    async def test_remove_missing(self, tracker, identity):
        with pytest.raises(NotFoundError):
            await tracker.remove_interaction(identity, "v1", "like")

    @pytest.mark.asyncio
    async def test_other_users_isolated(self, tracker, identity):
        await tracker.toggle_interaction(Identity(user_id=2, username="bob"), "v1", "like")

        assert await tracker.interactions(identity) == []
