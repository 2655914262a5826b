"""
Render contexts: one stack frame per active render call.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, TextIO

from ..error.exceptions import ErrorContext, RenderStateError

logger = logging.getLogger(__name__)

class RenderState(Enum):
    """Lifecycle of a frame."""
    RENDERING = "rendering"
    BODY_COMPLETE = "body_complete"
    EXTENSION_PENDING = "extension_pending"
    COMPOSING = "composing"
    DONE = "done"

@dataclass
class RenderContext:
    """
    State of one render call.

    ``output`` is the sink of the executing body; it is only set while the
    body runs.
    """
    template_name: str
    variables: Dict[str, Any] = field(default_factory=dict)
    extend_target: Optional[str] = None
    extend_variables: Dict[str, Any] = field(default_factory=dict)
    return_value: Any = None
    state: RenderState = RenderState.RENDERING
    output: Optional[TextIO] = field(default=None, repr=False)

class ContextStack:
    """Stack of active render contexts; the top frame is the current one."""

    def __init__(self):
        self._frames: List[RenderContext] = []

    def push(self, frame: RenderContext) -> None:
        self._frames.append(frame)
        logger.debug(f"Pushed render context {frame.template_name} (depth {len(self._frames)})")

    def pop(self, frame: RenderContext) -> RenderContext:
        """
        Pop the top frame.

        Args:
            frame: The frame the caller expects on top

        Raises:
            RenderStateError: If frames were not nested strictly
        """
        if not self._frames or self._frames[-1] is not frame:
            raise RenderStateError(
                f"render context {frame.template_name} is not the current context",
                context=ErrorContext("ContextStack", "pop", template=frame.template_name),
            )
        self._frames.pop()
        frame.state = RenderState.DONE
        logger.debug(f"Popped render context {frame.template_name} (depth {len(self._frames)})")
        return frame

    def truncate(self, depth: int) -> None:
        """
        Drop every frame above ``depth``.

        Unlike ``pop`` this does not require strict nesting, so it also
        releases frames left behind by an interrupted push or pop.
        """
        released = self._frames[depth:]
        del self._frames[depth:]
        for frame in released:
            frame.state = RenderState.DONE
        if released:
            logger.debug(f"Released {len(released)} render context(s) (depth {depth})")

    @property
    def current(self) -> RenderContext:
        """
        The current frame.

        Raises:
            RenderStateError: If no template is being rendered
        """
        if not self._frames:
            raise RenderStateError(
                "no template is being rendered",
                context=ErrorContext("ContextStack", "current"),
            )
        return self._frames[-1]

    @property
    def depth(self) -> int:
        return len(self._frames)

    def chain(self) -> List[str]:
        """Template names from the outermost to the current frame."""
        return [frame.template_name for frame in self._frames]

    def merged_variables(self, global_scope: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Union of the global scope and every active frame's variables.

        Later frames override earlier ones; the global scope has the lowest
        priority.
        """
        merged = dict(global_scope)
        for frame in self._frames:
            merged.update(frame.variables)
        return merged

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[RenderContext]:
        return iter(self._frames)
