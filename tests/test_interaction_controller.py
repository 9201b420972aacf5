from datetime import datetime
from unittest import mock

import pytest

from formstamp.controllers import (
    ConfigurationProvider,
    ConfigurationResult,
    InteractionController,
    InteractionPhase,
)
from formstamp.core.markup import (
    DateTimeStampAnnotation,
    HighlightAnnotation,
    HighlightShape,
    MarkupTool,
    Point,
)


class ScriptedProvider(ConfigurationProvider):
    """Answers every configuration request with a canned result."""

    def __init__(self, result=None):
        self.result = result
        self.requests = []

    def configure(self, request):
        self.requests.append(request)
        return self.result


@pytest.fixture
def controller(store):
    return InteractionController(store)


class TestArming:
    def test_arm_and_toggle_off(self, controller, store):
        controller.arm_tool(MarkupTool.SIGNATURE)
        assert controller.phase == InteractionPhase.TOOL_ARMED
        assert store.state.active_tool == MarkupTool.SIGNATURE
        controller.arm_tool(MarkupTool.SIGNATURE)
        assert controller.phase == InteractionPhase.IDLE
        assert store.state.active_tool is None

    def test_switch_tool(self, controller, store):
        controller.arm_tool(MarkupTool.SIGNATURE)
        controller.arm_tool(MarkupTool.TEXT_AREA)
        assert store.state.active_tool == MarkupTool.TEXT_AREA

    def test_arming_keeps_selection(self, controller, store, text_box):
        controller.arm_tool(MarkupTool.HIGHLIGHT_AREA)
        assert store.state.selected_annotation_id == text_box

    def test_arming_while_awaiting_cancels(self, controller, store):
        controller.arm_tool(MarkupTool.HIGHLIGHT_AREA)
        controller.surface_click(Point(50, 50))
        controller.arm_tool(MarkupTool.TEXT_AREA)
        assert controller.pending_request is None
        assert store.state.pending_placement is None
        assert store.state.active_tool == MarkupTool.TEXT_AREA


class TestPlacement:
    def test_click_then_cancel_clears_everything(self, controller, store):
        controller.arm_tool(MarkupTool.HIGHLIGHT_AREA)
        controller.surface_click(Point(50, 50))
        assert controller.phase == InteractionPhase.AWAITING_CONFIGURATION
        assert store.state.pending_placement == Point(50, 50)

        controller.cancel()
        assert store.state.active_tool is None
        assert store.state.pending_placement is None
        assert store.state.editing_annotation_id is None
        assert store.count() == 0

    def test_click_converts_to_document_space(self, controller, store):
        controller.set_page(2, 2.0)
        controller.arm_tool(MarkupTool.HIGHLIGHT_AREA)
        controller.surface_click(Point(100, 60))
        request = controller.pending_request
        assert request.placement == Point(50, 30)
        assert request.page_number == 2
        assert request.prefill == {"color": "#ffff00", "opacity": 0.3}

    def test_commit_creates_at_placement(self, controller, store):
        controller.arm_tool(MarkupTool.HIGHLIGHT_AREA)
        controller.surface_click(Point(50, 50))
        annotation_id = controller.commit({"color": "#ff0000", "opacity": 0.5, "shape": "freeform"})

        created = store.get(annotation_id)
        assert isinstance(created, HighlightAnnotation)
        assert (created.x, created.y) == (50, 50)
        assert (created.width, created.height) == (200, 50)
        assert created.shape == HighlightShape.FREEFORM
        assert store.state.selected_annotation_id == annotation_id
        assert store.state.active_tool is None
        assert controller.phase == InteractionPhase.SELECTED

    def test_invalid_enum_value_drops_commit_and_clears_state(self, controller, store):
        controller.arm_tool(MarkupTool.HIGHLIGHT_AREA)
        controller.surface_click(Point(50, 50))
        assert controller.commit({"shape": "ellipse"}) is None
        assert store.count() == 0
        assert store.state.active_tool is None
        assert store.state.pending_placement is None
        assert controller.pending_request is None
        assert controller.phase == InteractionPhase.IDLE

    def test_invalid_enum_value_during_edit_leaves_annotation(self, controller, store, text_box):
        controller.invoke_edit(text_box)
        assert controller.commit({"text_align": "justify"}) is None
        assert store.get(text_box).text == "Hello"
        assert store.state.editing_annotation_id is None

    def test_commit_ignores_position_in_payload(self, controller, store):
        controller.arm_tool(MarkupTool.SIGNATURE)
        controller.surface_click(Point(10, 20))
        annotation_id = controller.commit({"signature_data": "data:", "x": 999, "id": "mine"})
        created = store.get(annotation_id)
        assert (created.x, created.y) == (10, 20)
        assert created.id != "mine"

    def test_date_stamp_width_follows_text(self, controller, store):
        controller.arm_tool(MarkupTool.DATE_TIME_STAMP)
        controller.surface_click(Point(0, 0))
        annotation_id = controller.commit({
            "date_time": datetime(2024, 3, 5, 14, 7, 9),
            "format": "EEEE, MMMM dd, yyyy",
        })
        created = store.get(annotation_id)
        assert isinstance(created, DateTimeStampAnnotation)
        assert created.width == len("Tuesday, March 05, 2024") * 8
        assert created.height == 30

    def test_click_without_tool_deselects(self, controller, store, text_box):
        controller.surface_click(Point(5, 5))
        assert store.state.selected_annotation_id is None
        assert controller.pending_request is None

    def test_element_click_selects_without_placing(self, controller, store, text_box):
        other = store.create(HighlightAnnotation(page_number=1, x=0, y=0, width=10, height=10))
        controller.arm_tool(MarkupTool.SIGNATURE)
        controller.element_click(text_box)
        assert store.state.selected_annotation_id == text_box
        assert store.state.pending_placement is None
        assert controller.pending_request is None
        assert other in store

    def test_invalid_scale_ignores_click(self, controller, store):
        controller.set_page(1, 0)
        controller.arm_tool(MarkupTool.TEXT_AREA)
        controller.surface_click(Point(10, 10))
        assert controller.pending_request is None

    def test_provider_resolves_synchronously(self, store):
        provider = ScriptedProvider(ConfigurationResult(True, {"signature_data": "data:x"}))
        controller = InteractionController(store, provider)
        controller.arm_tool(MarkupTool.SIGNATURE)
        controller.surface_click(Point(30, 40))
        assert len(provider.requests) == 1
        assert store.count() == 1
        assert controller.phase == InteractionPhase.SELECTED

    def test_provider_cancel(self, store):
        provider = ScriptedProvider(ConfigurationResult(False))
        controller = InteractionController(store, provider)
        controller.arm_tool(MarkupTool.SIGNATURE)
        controller.surface_click(Point(30, 40))
        assert store.count() == 0
        assert controller.phase == InteractionPhase.IDLE


class TestEdit:
    def test_changed_field_only(self, controller, store):
        annotation_id = store.create(HighlightAnnotation(
            page_number=1, x=10, y=20, width=100, height=30, color="#ffff00",
        ))
        controller.element_click(annotation_id)
        controller.invoke_edit()
        request = controller.pending_request
        assert request.is_edit
        assert request.prefill["color"] == "#ffff00"

        payload = dict(request.prefill, color="#ff0000")
        with mock.patch.object(store, "update", wraps=store.update) as spy:
            controller.commit(payload)
        spy.assert_called_once()
        assert spy.call_args[0][1] == {"color": "#ff0000"}

        edited = store.get(annotation_id)
        assert edited.color == "#ff0000"
        assert (edited.x, edited.y, edited.width, edited.height, edited.page_number) == (10, 20, 100, 30, 1)
        assert store.state.editing_annotation_id is None

    def test_unchanged_commit_skips_update(self, controller, store, text_box):
        controller.invoke_edit(text_box)
        with mock.patch.object(store, "update") as spy:
            controller.commit(dict(controller.pending_request.prefill))
        spy.assert_not_called()

    def test_edit_requires_selection(self, controller, store, text_box):
        store.select(None)
        controller.invoke_edit(text_box)
        assert controller.pending_request is None

    def test_edit_disarms_tool(self, controller, store, text_box):
        controller.arm_tool(MarkupTool.SIGNATURE)
        controller.invoke_edit(text_box)
        assert store.state.active_tool is None
        assert store.state.editing_annotation_id == text_box

    def test_annotation_deleted_during_edit(self, controller, store, text_box):
        controller.invoke_edit(text_box)
        store.delete(text_box)
        assert controller.commit({"text": "late"}) is None
        assert store.count() == 0


class TestKeyboard:
    def test_escape_backs_out_one_level(self, controller, store, text_box):
        controller.arm_tool(MarkupTool.TEXT_AREA)
        controller.escape()
        assert store.state.active_tool is None
        assert store.state.selected_annotation_id == text_box
        controller.escape()
        assert store.state.selected_annotation_id is None

    def test_delete_selected(self, controller, store, text_box):
        controller.delete_selected()
        assert store.count() == 0
        controller.delete_selected()
