"""
Tests for pointer-driven annotation editing.
"""
import pytest
from PyQt5.QtGui import QColor, QImage

from pagescribe.controllers import AnnotationController, ColorTarget, EditorSession, Tool
from pagescribe.core.annotations import FontFamily
from pagescribe.core.geometry import Point
from pagescribe.errors import DocumentNotLoaded
from tests.conftest import pts


def drag(controller, *positions):
    first, *rest = positions
    controller.pointer_pressed(*first)
    for position in rest:
        controller.pointer_moved(*position)
    controller.pointer_released(*positions[-1])


def click(controller, x, y):
    controller.pointer_pressed(x, y)
    controller.pointer_released(x, y)


class TestPencil:

    def test_stroke_in_document_units(self, controller, session):
        session.set_zoom(2.0)
        session.go_to_page(2)
        controller.set_tool(Tool.PENCIL)

        drag(controller, (20, 40), (60, 40), (100, 80))

        stroke, = session.store.strokes
        assert stroke.points == tuple(pts((10, 20), (30, 20), (50, 40)))
        assert stroke.page_number == 2
        assert stroke.stroke_width == session.settings.pencil_width
        assert session.history.can_undo()

    def test_preview_emitted_while_drawing(self, controller):
        previews = []
        controller.stroke_preview.connect(previews.append)
        controller.set_tool(Tool.PENCIL)

        drag(controller, (0, 0), (5, 5), (10, 10))

        assert len(previews[-2]) == 3
        assert previews[-1] == []

    def test_click_without_movement_discarded(self, controller, session):
        controller.set_tool(Tool.PENCIL)

        click(controller, 10, 10)

        assert session.store.strokes == ()
        assert not session.history.can_undo()

    def test_pencil_color(self, controller, session):
        controller.apply_color(ColorTarget.PENCIL, "#123456")
        controller.set_tool(Tool.PENCIL)

        drag(controller, (0, 0), (10, 10))

        assert session.store.strokes[0].color == "#123456"

    def test_needs_document(self):
        controller = AnnotationController(EditorSession())
        controller.set_tool(Tool.PENCIL)
        with pytest.raises(DocumentNotLoaded):
            controller.pointer_pressed(0, 0)


class TestEraser:

    def _draw_line(self, controller):
        controller.set_tool(Tool.PENCIL)
        drag(controller, (0, 100), (50, 100), (100, 100))
        controller.set_tool(Tool.ERASER)

    def test_click_splits_stroke(self, controller, session):
        self._draw_line(controller)

        click(controller, 50, 100)

        left, right = session.store.strokes
        assert [p.x for p in left.points] == pytest.approx([0, 40])
        assert [p.x for p in right.points] == pytest.approx([60, 100])
        assert all(p.y == 100 for p in left.points + right.points)

    def test_gesture_is_one_undo_step(self, controller, session):
        self._draw_line(controller)
        original = session.store.strokes

        drag(controller, (0, 100), (50, 100), (100, 100))
        assert session.store.strokes == ()

        assert controller.undo()
        assert session.store.strokes == original

    def test_sweep_catches_points_between_samples(self, controller, session):
        controller.set_tool(Tool.PENCIL)
        drag(controller, (40, 0), (40, 50), (40, 100), (40, 150))
        controller.set_tool(Tool.ERASER)

        # Pointer jumps over x=40; the swept positions still hit (40, 50)
        drag(controller, (0, 50), (80, 50))

        assert all(
            Point(40, 50) not in stroke.points for stroke in session.store.strokes
        )
        assert len(session.store.strokes) == 2

    def test_zoom_scales_footprint(self, controller, session):
        self._draw_line(controller)
        session.set_zoom(2.0)

        # 20px eraser at zoom 2 covers a 5 point radius around (50, 100)
        click(controller, 100, 200)

        left, right = session.store.strokes
        assert left.points[-1].x == pytest.approx(45)
        assert right.points[0].x == pytest.approx(55)

    def test_miss_records_no_history(self, controller, session):
        self._draw_line(controller)
        session.history.clear()

        click(controller, 50, 250)

        assert not session.history.can_undo()

    def test_cursor_centered_on_pointer(self, controller):
        controller.eraser_size = 30
        assert controller.eraser_cursor_rect(150, 200) == (135, 185, 30, 30)


class TestText:

    def test_place_text(self, controller, session):
        session.set_zoom(2.0)
        controller.set_tool(Tool.TEXT)

        controller.pointer_pressed(100, 60)

        annotation, = session.store.text_annotations
        assert (annotation.x, annotation.y) == (50, 30)
        assert annotation.font_size == 8
        assert annotation.text == session.settings.placeholder_text
        assert annotation.font_family is FontFamily.ARIAL
        assert controller.tool is Tool.SELECT
        assert controller.selected_text_id == annotation.id

    def _place(self, controller, x=50, y=50):
        controller.set_tool(Tool.TEXT)
        controller.pointer_pressed(x, y)
        controller.clear_selection()
        return controller.session.store.text_annotations[-1].id

    def test_click_selects(self, controller):
        aid = self._place(controller)
        selections = []
        controller.selection_changed.connect(selections.append)

        click(controller, 55, 55)

        assert controller.selected_text_id == aid
        assert selections[-1].id == aid

    def test_drag_moves_text(self, controller, session):
        aid = self._place(controller)
        history_before = len(session.history.undo_stack)

        drag(controller, (55, 55), (65, 70), (75, 85))

        annotation = session.store.get_text_annotation(aid)
        assert (annotation.x, annotation.y) == (70, 80)
        assert len(session.history.undo_stack) == history_before + 1
        assert controller.selected_text_id is None

    def test_small_jitter_is_a_click(self, controller, session):
        aid = self._place(controller)

        drag(controller, (55, 55), (57, 56))

        annotation = session.store.get_text_annotation(aid)
        assert (annotation.x, annotation.y) == (50, 50)
        assert controller.selected_text_id == aid

    def test_text_hit_box(self, controller):
        aid = self._place(controller)

        assert controller.text_at_point(Point(51, 60)).id == aid
        assert controller.text_at_point(Point(51, 70)) is None
        assert controller.text_at_point(Point(45, 60)) is None

    def test_edit_selected(self, controller, session):
        aid = self._place(controller)
        click(controller, 55, 55)

        assert controller.set_selected_text("Edited")
        assert controller.toggle_selected_style("bold")
        assert controller.set_selected_font_family("Courier New")
        session.set_zoom(2.0)
        assert controller.set_selected_font_size(24)
        controller.apply_color(ColorTarget.TEXT, "#ff0000")

        annotation = session.store.get_text_annotation(aid)
        assert annotation.text == "Edited"
        assert annotation.bold
        assert annotation.font_family is FontFamily.COURIER_NEW
        assert annotation.font_size == 12
        assert annotation.color == "#ff0000"
        assert controller.text_color == "#ff0000"

    def test_invalid_edits_rejected(self, controller):
        self._place(controller)
        click(controller, 55, 55)

        assert not controller.set_selected_font_size(0)
        assert not controller.set_selected_font_size(float("nan"))
        assert not controller.set_selected_color("red")
        with pytest.raises(ValueError):
            controller.toggle_selected_style("strikeout")

    def test_edits_without_selection(self, controller):
        assert not controller.set_selected_text("x")
        assert not controller.toggle_selected_style("italic")


class TestSelection:

    def test_select_and_delete_stroke(self, controller, session):
        controller.set_tool(Tool.PENCIL)
        drag(controller, (10, 200), (100, 200))
        controller.set_tool(Tool.SELECT)

        click(controller, 50, 202)
        stroke_id = controller.selected_stroke_id
        assert stroke_id == session.store.strokes[0].id

        assert controller.delete_selected()
        assert session.store.strokes == ()
        assert controller.selected_stroke_id is None

        assert controller.undo()
        assert [s.id for s in session.store.strokes] == [stroke_id]

    def test_click_on_empty_area_clears(self, controller):
        controller.set_tool(Tool.TEXT)
        controller.pointer_pressed(50, 50)

        click(controller, 190, 290)

        assert controller.selected_text_id is None
        assert controller.selected_stroke_id is None

    def test_delete_without_selection(self, controller):
        assert not controller.delete_selected()


class TestColors:

    def test_pick_color(self, controller):
        image = QImage(10, 10, QImage.Format_RGB32)
        image.fill(QColor("#3366cc"))

        assert controller.pick_color(image, 4, 4, ColorTarget.PENCIL) == "#3366cc"
        assert controller.pencil_style.color == "#3366cc"
