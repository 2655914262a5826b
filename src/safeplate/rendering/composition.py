"""
Template composition: extends, include and output recording.

A body declares its parent with ``template.extends(name, variables)``;
the parent is rendered only after the body completes, with the child's
output under ``_contents``. ``template.include(name, variables)`` renders
another template immediately and writes the result at the point of the
call.
"""
import io
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

from ..error.exceptions import ErrorContext, RecursionDepthError, RenderStateError
from ..variables.escape import html_escape
from .context import ContextStack, RenderContext, RenderState

logger = logging.getLogger(__name__)

# holds the child's output while its parent renders
CONTENTS_VARIABLE = "_contents"

class CompositionController:
    """Drives the frame lifecycle of an engine's render calls."""

    def __init__(self, engine, stack: ContextStack, max_depth: int = 64):
        """
        Initialize the controller.

        Args:
            engine: Engine used to render parents and included templates
            stack: The engine's context stack
            max_depth: Maximum number of simultaneously active frames
        """
        self.engine = engine
        self.stack = stack
        self.max_depth = max_depth

    @contextmanager
    def frame(self, frame: RenderContext) -> Iterator[RenderContext]:
        """
        Keep ``frame`` on the stack for the duration of the block.

        Raises:
            RecursionDepthError: If the stack is already ``max_depth`` frames deep
        """
        if self.stack.depth >= self.max_depth:
            raise RecursionDepthError(frame.template_name, self.max_depth, self.stack.chain())
        depth = self.stack.depth
        try:
            self.stack.push(frame)
            yield frame
        finally:
            self.stack.truncate(depth)

    @contextmanager
    def recording(self, frame: RenderContext) -> Iterator[io.StringIO]:
        """
        Open the output sink of a body.

        The sink is detached from the frame and closed on every exit path,
        so a failing body never leaves output behind for an outer frame.
        """
        sink = io.StringIO()
        frame.output = sink
        try:
            yield sink
        finally:
            frame.output = None
            sink.close()

    def active_frame(self, frame: Optional[RenderContext], operation: str) -> RenderContext:
        frame = frame if frame is not None else self.stack.current
        if frame.state is not RenderState.RENDERING or frame.output is None:
            raise RenderStateError(
                f"{operation} can only be called while the body of {frame.template_name} executes",
                context=ErrorContext("CompositionController", operation, template=frame.template_name),
            )
        return frame

    def extends(self, name: str, variables: Optional[Mapping[str, Any]] = None,
                frame: Optional[RenderContext] = None) -> None:
        """
        Declare the parent of the executing body.

        Nothing is rendered until the body completes. A later call replaces
        an earlier one.

        Args:
            name: Parent template name
            variables: Variables for the parent render
            frame: Frame of the calling body; the current frame by default
        """
        frame = self.active_frame(frame, "extends")
        if frame.extend_target is not None:
            logger.debug(f"{frame.template_name} replaces parent {frame.extend_target} with {name}")
        frame.extend_target = name
        frame.extend_variables = dict(variables or {})

    def include(self, name: str, variables: Optional[Mapping[str, Any]] = None,
                frame: Optional[RenderContext] = None) -> None:
        """
        Render a template and write it into the executing body's output.

        ``variables`` are only visible to the included render.
        """
        frame = self.active_frame(frame, "include")
        logger.debug(f"{frame.template_name} includes {name}")
        contents = self.engine.render(name, variables)
        frame.output.write(contents)

    def complete(self, frame: RenderContext, contents: str) -> str:
        """
        Finish a frame whose body has run.

        Args:
            frame: The frame, still on the stack
            contents: Output captured from the body

        Returns:
            The parent's output when the body extends one, else ``contents``
        """
        frame.state = RenderState.BODY_COMPLETE
        if frame.extend_target is None:
            return contents

        frame.state = RenderState.EXTENSION_PENDING
        variables = {**frame.extend_variables, CONTENTS_VARIABLE: contents}
        frame.state = RenderState.COMPOSING
        logger.debug(f"Composing {frame.template_name} into parent {frame.extend_target}")
        return self.engine.render(frame.extend_target, variables)

class TemplateReceiver:
    """
    The ``template`` object of a body.

    Bound to the frame of the body it was created for.
    """

    __slots__ = ("_controller", "_frame")

    def __init__(self, controller: CompositionController, frame: RenderContext):
        self._controller = controller
        self._frame = frame

    def extends(self, name: str, variables: Optional[Mapping[str, Any]] = None) -> None:
        self._controller.extends(name, variables, frame=self._frame)

    def include(self, name: str, variables: Optional[Mapping[str, Any]] = None) -> None:
        self._controller.include(name, variables, frame=self._frame)

    def echo(self, *values: Any) -> None:
        """Write values to the body's output; None writes nothing."""
        sink = self._controller.active_frame(self._frame, "echo").output
        for value in values:
            if value is not None:
                sink.write(str(value))

    def check(self, value: Any) -> bool:
        return self._controller.engine.check(value)

    def escape(self, value: Any) -> str:
        return html_escape(value)

    @property
    def name(self) -> str:
        return self._frame.template_name

    @property
    def return_value(self) -> Any:
        return self._frame.return_value

    @return_value.setter
    def return_value(self, value: Any) -> None:
        self._frame.return_value = value
