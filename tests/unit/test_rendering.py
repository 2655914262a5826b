import pytest

from safeplate.engine import Engine
from safeplate.error.exceptions import RecursionDepthError, RenderStateError
from safeplate.rendering import (
    CONTENTS_VARIABLE,
    CompositionController,
    ContextStack,
    RenderContext,
    RenderState,
    TemplateReceiver,
)

def test_stack_push_pop():
    """Test frame nesting."""
    stack = ContextStack()
    outer = RenderContext("outer", {"a": 1})
    inner = RenderContext("inner", {"b": 2})
    stack.push(outer)
    stack.push(inner)
    assert stack.current is inner
    assert stack.chain() == ["outer", "inner"]
    assert len(stack) == 2

    with pytest.raises(RenderStateError):
        stack.pop(outer)

    assert stack.pop(inner) is inner
    assert inner.state is RenderState.DONE
    assert stack.current is outer

def test_stack_empty():
    """Test the current frame of an empty stack."""
    with pytest.raises(RenderStateError, match="no template is being rendered"):
        ContextStack().current

def test_merged_variables():
    """Test that later frames override earlier frames and globals."""
    stack = ContextStack()
    stack.push(RenderContext("outer", {"a": "outer", "b": "outer"}))
    stack.push(RenderContext("inner", {"b": "inner"}))
    merged = stack.merged_variables({"a": "global", "c": "global"})
    assert merged == {"a": "outer", "b": "inner", "c": "global"}

def test_frame_depth_guard(engine: Engine):
    """Test that frames beyond max_depth are refused."""
    controller = CompositionController(engine, ContextStack(), max_depth=2)
    with controller.frame(RenderContext("one")):
        with controller.frame(RenderContext("two")):
            with pytest.raises(RecursionDepthError) as exc_info:
                with controller.frame(RenderContext("three")):
                    pass
    assert exc_info.value.chain == ["one", "two"]
    assert "one -> two -> three" in str(exc_info.value)
    assert len(controller.stack) == 0

def test_frame_releases_stray_frames(engine: Engine):
    """Test that leaving a frame also drops frames pushed above it."""
    controller = CompositionController(engine, ContextStack())
    with controller.frame(RenderContext("outer")):
        with controller.frame(RenderContext("page")):
            stray = RenderContext("stray")
            controller.stack.push(stray)
        assert controller.stack.chain() == ["outer"]
        assert stray.state is RenderState.DONE
    assert len(controller.stack) == 0

def test_stack_truncate():
    """Test dropping frames down to a depth."""
    stack = ContextStack()
    frames = [RenderContext(name) for name in ("a", "b", "c")]
    for frame in frames:
        stack.push(frame)
    stack.truncate(1)
    assert stack.chain() == ["a"]
    assert [frame.state for frame in frames] == [RenderState.RENDERING, RenderState.DONE, RenderState.DONE]
    stack.truncate(5)
    assert stack.depth == 1

def test_recording_closes_sink_on_error(engine: Engine):
    """Test that a failing body closes and detaches its sink."""
    controller = CompositionController(engine, ContextStack())
    frame = RenderContext("page")
    with pytest.raises(KeyError):
        with controller.recording(frame) as sink:
            sink.write("partial")
            raise KeyError("boom")
    assert frame.output is None
    assert sink.closed

def test_receiver_outside_body(engine: Engine):
    """Test that a receiver is unusable once its body finished."""
    controller = CompositionController(engine, ContextStack())
    frame = RenderContext("page")
    receiver = TemplateReceiver(controller, frame)

    with controller.recording(frame):
        receiver.echo("x", None, 1)
        receiver.extends("layout", {"title": "t"})
        receiver.return_value = "done"

    assert frame.extend_target == "layout"
    assert frame.extend_variables == {"title": "t"}
    assert receiver.return_value == "done"
    assert receiver.name == "page"
    with pytest.raises(RenderStateError):
        receiver.echo("late")
    with pytest.raises(RenderStateError):
        receiver.include("partial")

def test_receiver_helpers(engine: Engine):
    """Test the check and escape helpers of a body."""
    receiver = TemplateReceiver(engine.composition, RenderContext("page"))
    assert receiver.check(0) is False
    assert receiver.escape("<") == "&lt;"

def test_complete_without_parent(engine: Engine):
    """Test that a frame without a parent keeps its contents."""
    frame = RenderContext("page")
    assert engine.composition.complete(frame, "body") == "body"
    assert frame.state is RenderState.BODY_COMPLETE

def test_complete_with_parent(engine: Engine):
    """Test that a parent receives the contents."""
    frame = RenderContext("page", extend_target="wrap", extend_variables={CONTENTS_VARIABLE: "ignored"})
    assert engine.composition.complete(frame, "<body>") == "[&lt;body&gt;]"
    assert frame.state is RenderState.COMPOSING
