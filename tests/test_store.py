"""
Tests for the annotation store: CRUD, page renumbering and snapshots.
"""
import pytest

from pagescribe.core.annotations import AnnotationStore, FontFamily, StrokeStyle
from pagescribe.core.geometry import Point
from pagescribe.errors import InvalidInput, NotFound
from tests.conftest import pts


def add_text(store, page, text="note", **style):
    return store.add_text_annotation(text, 10, 20, 12, "#112233", page, **style)


class TestStrokes:

    def test_add_and_get(self, store, style):
        sid = store.add_stroke(pts((0, 0), (5, 5)), style, 1)

        stroke = store.get_stroke(sid)
        assert stroke.points == (Point(0, 0), Point(5, 5))
        assert stroke.color == "#ff0000"
        assert stroke.page_number == 1

    @pytest.mark.parametrize("points,page,stroke_style", [
        (((0, 0),), 1, StrokeStyle()),
        ((), 1, StrokeStyle()),
        (((0, 0), (1, 1)), 0, StrokeStyle()),
        (((0, 0), (1, 1)), 4, StrokeStyle()),
        (((0, 0), (1, 1)), 1, StrokeStyle(color="red")),
        (((0, 0), (1, 1)), 1, StrokeStyle(stroke_width=0)),
        (((0, 0), (1, 1)), 1, StrokeStyle(opacity=1.5)),
        (((0, 0), (1, 1)), 1, StrokeStyle(stroke_width=float("nan"))),
        (((0, 0), (1, 1)), 1, StrokeStyle(stroke_width=float("inf"))),
        (((0, 0), (1, 1)), 1, StrokeStyle(opacity=float("nan"))),
        (((0, 0), (1, 1)), 1, StrokeStyle(stroke_width="3")),
        (((0, 0), (float("nan"), 1)), 1, StrokeStyle()),
    ])
    def test_rejected_input_creates_nothing(self, store, points, page, stroke_style):
        assert store.add_stroke(pts(*points), stroke_style, page) is None
        assert store.strokes == ()

    def test_remove_is_idempotent(self, store, style):
        sid = store.add_stroke(pts((0, 0), (5, 5)), style, 1)

        assert store.remove_stroke(sid)
        assert not store.remove_stroke(sid)
        assert not store.remove_stroke("missing")

    def test_get_missing_raises(self, store):
        with pytest.raises(NotFound):
            store.get_stroke("missing")

    def test_stroke_at_point_prefers_latest(self, store, style):
        store.add_stroke(pts((0, 100), (100, 100)), style, 1)
        top = store.add_stroke(pts((50, 0), (50, 200)), style, 1)

        assert store.stroke_at_point(1, Point(50, 102)).id == top
        assert store.stroke_at_point(2, Point(50, 102)) is None

    def test_stroke_at_point_tolerance_scales_with_zoom(self, store):
        thin = StrokeStyle(stroke_width=1)
        store.add_stroke(pts((0, 100), (100, 100)), thin, 1)

        # Minimum tolerance is 5 screen pixels
        assert store.stroke_at_point(1, Point(50, 104.9)) is not None
        assert store.stroke_at_point(1, Point(50, 104.9), zoom=2.0) is None
        assert store.stroke_at_point(1, Point(50, 102.4), zoom=2.0) is not None


class TestTextAnnotations:

    def test_add_with_style(self, store):
        aid = add_text(store, 2, font_family="Georgia", bold=True, underline=True)

        annotation = store.get_text_annotation(aid)
        assert annotation.font_family is FontFamily.GEORGIA
        assert annotation.bold and annotation.underline and not annotation.italic
        assert annotation.page_number == 2

    @pytest.mark.parametrize("kwargs", [
        dict(font_size=0),
        dict(font_size=float("nan")),
        dict(font_size="12"),
        dict(x=float("nan")),
        dict(y=float("inf")),
        dict(color="blue"),
        dict(page_number=9),
    ])
    def test_rejected_input(self, store, kwargs):
        args = dict(text="t", x=0, y=0, font_size=12, color="#000000", page_number=1)
        args.update(kwargs)

        assert store.add_text_annotation(**args) is None
        assert store.text_annotations == ()

    def test_unknown_font_family_rejected(self, store):
        assert add_text(store, 1, font_family="Comic Sans") is None

    def test_update_fields(self, store):
        aid = add_text(store, 1)

        assert store.update_text_annotation(aid, text="changed", x=40, italic=True)
        annotation = store.get_text_annotation(aid)
        assert annotation.text == "changed"
        assert annotation.x == 40
        assert annotation.italic
        assert annotation.id == aid

    def test_update_absent_is_noop(self, store):
        seen = []
        store.annotations_changed.connect(lambda: seen.append(1))

        assert not store.update_text_annotation("missing", text="x")
        assert seen == []

    @pytest.mark.parametrize("changes", [
        dict(font_size=-1),
        dict(font_size=float("nan")),
        dict(font_size="12"),
        dict(x=None),
        dict(font_family=["Arial"]),
        dict(color="nope"),
        dict(page_number=10),
        dict(id="other"),
        dict(weight=700),
    ])
    def test_invalid_update_leaves_annotation(self, store, changes):
        aid = add_text(store, 1)
        before = store.get_text_annotation(aid)

        assert not store.update_text_annotation(aid, **changes)
        assert store.get_text_annotation(aid) == before

    def test_remove(self, store):
        aid = add_text(store, 1)

        assert store.remove_text_annotation(aid)
        assert not store.remove_text_annotation(aid)
        with pytest.raises(NotFound):
            store.get_text_annotation(aid)


class TestPageRenumbering:

    @pytest.fixture
    def five_pages(self):
        store = AnnotationStore()
        store.load_pages(5)
        return store

    def test_remove_page(self, five_pages, style):
        s2 = five_pages.add_stroke(pts((0, 0), (1, 1)), style, 2)
        t3 = add_text(five_pages, 3)
        s5 = five_pages.add_stroke(pts((0, 0), (1, 1)), style, 5)

        dropped = five_pages.renumber_on_page_remove(3)

        assert dropped == 1
        assert five_pages.get_stroke(s2).page_number == 2
        assert five_pages.get_stroke(s5).page_number == 4
        with pytest.raises(NotFound):
            five_pages.get_text_annotation(t3)
        assert five_pages.page_count == 4

    def test_move_page_forward(self, five_pages):
        ids = {page: add_text(five_pages, page, text=f"p{page}") for page in range(1, 6)}

        five_pages.renumber_on_page_move(0, 2)

        pages = {
            page: five_pages.get_text_annotation(aid).page_number
            for page, aid in ids.items()
        }
        assert pages == {1: 3, 2: 1, 3: 2, 4: 4, 5: 5}

    def test_move_page_backward(self, five_pages):
        ids = {page: add_text(five_pages, page) for page in range(1, 6)}

        five_pages.renumber_on_page_move(4, 1)

        pages = {
            page: five_pages.get_text_annotation(aid).page_number
            for page, aid in ids.items()
        }
        assert pages == {1: 1, 2: 3, 3: 4, 4: 5, 5: 2}

    def test_move_keeps_page_ids_with_content(self, five_pages):
        before = five_pages.page_ids

        five_pages.renumber_on_page_move(0, 2)

        assert five_pages.page_ids == (before[1], before[2], before[0], before[3], before[4])

    def test_move_out_of_range(self, five_pages):
        with pytest.raises(InvalidInput):
            five_pages.renumber_on_page_move(0, 5)

    def test_insert_page(self, five_pages, style):
        s1 = five_pages.add_stroke(pts((0, 0), (1, 1)), style, 1)
        s2 = five_pages.add_stroke(pts((0, 0), (1, 1)), style, 2)
        before = five_pages.page_ids

        new_id = five_pages.renumber_on_page_insert(1)

        assert five_pages.page_count == 6
        assert five_pages.page_ids[1] == new_id
        assert five_pages.page_ids[0] == before[0]
        assert five_pages.get_stroke(s1).page_number == 1
        assert five_pages.get_stroke(s2).page_number == 3

    def test_append_page(self, five_pages):
        five_pages.renumber_on_page_insert(5)
        assert five_pages.page_count == 6

    def test_every_annotation_references_existing_page(self, five_pages, style):
        for page in range(1, 6):
            five_pages.add_stroke(pts((0, 0), (1, 1)), style, page)
            add_text(five_pages, page)

        five_pages.renumber_on_page_remove(5)
        five_pages.renumber_on_page_move(3, 0)
        five_pages.renumber_on_page_remove(1)

        count = five_pages.page_count
        assert count == 3
        for annotation in five_pages.strokes + five_pages.text_annotations:
            assert 1 <= annotation.page_number <= count


class TestNotification:

    def test_batch_emits_once(self, store, style):
        seen = []
        store.annotations_changed.connect(lambda: seen.append("annotations"))
        store.pages_changed.connect(lambda: seen.append("pages"))

        with store.batch():
            store.add_stroke(pts((0, 0), (1, 1)), style, 1)
            with store.batch():
                add_text(store, 2)
            store.renumber_on_page_insert(3)
            assert seen == []

        assert sorted(seen) == ["annotations", "pages"]

    def test_mutation_outside_batch_emits_immediately(self, store, style):
        seen = []
        store.annotations_changed.connect(lambda: seen.append(1))

        store.add_stroke(pts((0, 0), (1, 1)), style, 1)

        assert seen == [1]


class TestSnapshots:

    def test_restore(self, store, style):
        sid = store.add_stroke(pts((0, 0), (1, 1)), style, 1)
        state = store.snapshot()
        add_text(store, 2)
        store.remove_stroke(sid)

        store.restore(state)

        assert [s.id for s in store.strokes] == [sid]
        assert store.text_annotations == ()
        assert store.annotation_count() == 1

    def test_snapshot_is_detached(self, store, style):
        state = store.snapshot()
        store.add_stroke(pts((0, 0), (1, 1)), style, 1)

        assert state.strokes == ()

    def test_restore_rejects_other_page_layout(self, store):
        state = store.snapshot()
        store.renumber_on_page_insert(0)

        with pytest.raises(InvalidInput):
            store.restore(state)

    def test_state_page_filters(self, store, style):
        store.add_stroke(pts((0, 0), (1, 1)), style, 1)
        add_text(store, 2)
        state = store.snapshot()

        assert len(state.strokes_on_page(1)) == 1
        assert state.strokes_on_page(2) == []
        assert len(state.text_on_page(2)) == 1
