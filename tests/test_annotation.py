"""
Tuiter Backend — Tuit Annotator Unit Tests
============================================

What:  Tests for TuitAnnotator (viewer-relative likedByMe / dislikedByMe /
       bookmarkedByMe / ownedByMe flags).
How:   Uses in-memory FakePairStore instances (no database), with latency
       and failure injection.

What we test:
    ✅ Output keeps input order and length; input is not mutated
    ✅ Empty list and anonymous viewer issue no lookups
    ✅ Flags match the stored pairs (including the viewer's own tuits)
    ✅ Tuits without an author are annotated, never owned
    ✅ A failing lookup aborts the whole call with AnnotationError
    ✅ All 3 x N lookups are in flight at the same time
"""

import uuid

import pytest

from conftest import FakePairStore, make_tuit_response
from tuiter.exceptions import AnnotationError, StoreError
from tuiter.services.annotation import TuitAnnotator


def build_annotator(tracker, likes=(), dislikes=(), bookmarks=(), **fake_kwargs):
    return TuitAnnotator(
        likes=FakePairStore(likes, tracker=tracker, **fake_kwargs.get("likes_kwargs", {})),
        dislikes=FakePairStore(dislikes, tracker=tracker, **fake_kwargs.get("dislikes_kwargs", {})),
        bookmarks=FakePairStore(bookmarks, tracker=tracker, **fake_kwargs.get("bookmarks_kwargs", {})),
    )


def flags(tuit):
    return (tuit.liked_by_me, tuit.disliked_by_me, tuit.bookmarked_by_me, tuit.owned_by_me)


class TestAnnotateShape:
    """Order, length and copy semantics."""

    @pytest.mark.asyncio
    async def test_order_and_length_preserved(self, tracker):
        other = uuid.uuid4()
        tuits = [make_tuit_response(other, text=f"t{i}") for i in range(5)]
        annotator = build_annotator(tracker)

        result = await annotator.annotate(uuid.uuid4(), tuits)

        assert [t.id for t in result] == [t.id for t in tuits]
        assert [t.tuit for t in result] == ["t0", "t1", "t2", "t3", "t4"]

    @pytest.mark.asyncio
    async def test_input_is_not_mutated(self, tracker):
        viewer = uuid.uuid4()
        tuit = make_tuit_response(viewer)
        annotator = build_annotator(tracker, likes=[(viewer, tuit.id)])

        (result,) = await annotator.annotate(viewer, [tuit])

        assert result.liked_by_me is True
        assert result.owned_by_me is True
        assert tuit.liked_by_me is False
        assert tuit.owned_by_me is False

    @pytest.mark.asyncio
    async def test_empty_list_issues_no_lookups(self, tracker):
        annotator = build_annotator(tracker)

        result = await annotator.annotate(uuid.uuid4(), [])

        assert result == []
        assert tracker.calls == 0

    @pytest.mark.asyncio
    async def test_anonymous_viewer_gets_all_false(self, tracker):
        author = uuid.uuid4()
        tuit = make_tuit_response(author)
        annotator = build_annotator(tracker, likes=[(author, tuit.id)])

        (result,) = await annotator.annotate(None, [tuit])

        assert flags(result) == (False, False, False, False)
        assert tracker.calls == 0


class TestAnnotateFlags:
    """Flag values against stored pairs."""

    @pytest.mark.asyncio
    async def test_liked_bookmarked_owned_scenario(self, tracker):
        """U1 liked P1, bookmarked P2 and authored P3."""
        u1, someone_else = uuid.uuid4(), uuid.uuid4()
        p1 = make_tuit_response(someone_else, "P1")
        p2 = make_tuit_response(someone_else, "P2")
        p3 = make_tuit_response(u1, "P3")
        annotator = build_annotator(
            tracker,
            likes=[(u1, p1.id)],
            bookmarks=[(u1, p2.id)],
        )

        r1, r2, r3 = await annotator.annotate(u1, [p1, p2, p3])

        assert flags(r1) == (True, False, False, False)
        assert flags(r2) == (False, False, True, False)
        assert flags(r3) == (False, False, False, True)

    @pytest.mark.asyncio
    async def test_like_and_dislike_can_coexist(self, tracker):
        viewer = uuid.uuid4()
        tuit = make_tuit_response(uuid.uuid4())
        annotator = build_annotator(
            tracker,
            likes=[(viewer, tuit.id)],
            dislikes=[(viewer, tuit.id)],
        )

        (result,) = await annotator.annotate(viewer, [tuit])

        assert result.liked_by_me is True
        assert result.disliked_by_me is True

    @pytest.mark.asyncio
    async def test_other_users_records_are_ignored(self, tracker):
        viewer, other = uuid.uuid4(), uuid.uuid4()
        tuit = make_tuit_response(other)
        annotator = build_annotator(
            tracker,
            likes=[(other, tuit.id)],
            bookmarks=[(other, tuit.id)],
        )

        (result,) = await annotator.annotate(viewer, [tuit])

        assert flags(result) == (False, False, False, False)

    @pytest.mark.asyncio
    async def test_missing_author_is_never_owned(self, tracker):
        viewer = uuid.uuid4()
        orphan = make_tuit_response(None)
        annotator = build_annotator(tracker, bookmarks=[(viewer, orphan.id)])

        (result,) = await annotator.annotate(viewer, [orphan])

        assert result.owned_by_me is False
        assert result.bookmarked_by_me is True

    @pytest.mark.asyncio
    async def test_viewer_id_as_string_matches_uuid_author(self, tracker):
        viewer = uuid.uuid4()
        tuit = make_tuit_response(viewer)
        annotator = build_annotator(tracker)

        (result,) = await annotator.annotate(str(viewer), [tuit])

        assert result.owned_by_me is True


class TestAnnotateFailure:
    """All-or-nothing failure policy."""

    @pytest.mark.asyncio
    async def test_failed_dislike_lookup_raises_annotation_error(self, tracker):
        viewer = uuid.uuid4()
        tuits = [make_tuit_response(uuid.uuid4()) for _ in range(3)]
        annotator = build_annotator(
            tracker,
            likes=[(viewer, tuits[0].id)],
            dislikes_kwargs={"fail_for": [tuits[1].id]},
        )

        with pytest.raises(AnnotationError) as exc_info:
            await annotator.annotate(viewer, tuits)

        assert exc_info.value.relation == "dislikes"
        assert exc_info.value.context["tuit_count"] == 3
        assert isinstance(exc_info.value, StoreError)

    @pytest.mark.asyncio
    async def test_failure_leaves_no_lookup_running(self, tracker):
        viewer = uuid.uuid4()
        tuits = [make_tuit_response(uuid.uuid4()) for _ in range(4)]
        annotator = build_annotator(
            tracker,
            likes_kwargs={"fail_for": [tuits[0].id]},
            bookmarks_kwargs={"delay": 0.5},
        )

        with pytest.raises(AnnotationError):
            await annotator.annotate(viewer, tuits)

        assert tracker.current == 0


class TestAnnotateConcurrency:
    """Lookups are issued concurrently, not one by one."""

    @pytest.mark.asyncio
    async def test_all_lookups_in_flight_together(self, tracker):
        viewer = uuid.uuid4()
        n = 7
        tuits = [make_tuit_response(uuid.uuid4()) for _ in range(n)]
        annotator = build_annotator(tracker)

        await annotator.annotate(viewer, tuits)

        assert tracker.calls == 3 * n
        assert tracker.peak == 3 * n
        assert tracker.current == 0
