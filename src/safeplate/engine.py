"""
The template engine frontend.
"""
import functools
import logging
from pathlib import Path
from types import CodeType
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, Union

from .config.configuration import EngineConfiguration, ensure_engine_config
from .rendering.composition import CompositionController, TemplateReceiver
from .rendering.context import ContextStack, RenderContext
from .templates.cache import TemplateCache, compile_template
from .templates.resolver import TemplateResolver, TemplateSource
from .utils.logging import get_logger
from .variables.escape import html_escape
from .variables.value import EscapedValue

logger = logging.getLogger(__name__)

class RenderResult(NamedTuple):
    """Output of a render call and the value its body returned out of band."""
    contents: str
    return_value: Any = None

class Engine:
    """
    Renders Python template bodies with escaped variables.

    An engine owns a global scope and a stack of active render contexts.
    It is not safe for concurrent render calls from several threads.
    """

    variable_class = EscapedValue

    def __init__(
        self,
        template_dirs: Optional[Union[str, Path, Sequence[Union[str, Path]]]] = None,
        *,
        resolver: Optional[TemplateResolver] = None,
        config: Union[None, Dict[str, Any], str, Path, EngineConfiguration] = None
    ):
        """
        Initialize the engine.

        Args:
            template_dirs: Template directories, overriding the configured ones
            resolver: Template resolver; built from the template directories by default
            config: Engine configuration, a dict of settings or a YAML file path
        """
        if isinstance(template_dirs, (str, Path)):
            template_dirs = [template_dirs]
        self.config = ensure_engine_config(
            config,
            check_template_dirs=resolver is None,
            template_dirs=list(template_dirs) if template_dirs is not None else None,
        )
        self.resolver = resolver or TemplateResolver.from_directories(
            self.config.template_dirs,
            self.config.suffixes,
            self.config.encoding,
        )
        self.cache = TemplateCache(self.config.cache_size) if self.config.cache_enabled else None
        self.global_scope: Dict[str, Any] = dict(self.config.globals)
        self.stack = ContextStack()
        self.composition = CompositionController(self, self.stack, self.config.max_depth)

    # rendering

    def render(self, name: str, variables: Optional[Mapping[str, Any]] = None) -> str:
        """
        Render a template.

        Args:
            name: Logical template name, without suffix
            variables: Variables of this render call

        Returns:
            Rendered output

        Raises:
            TemplateNotFoundError: If the name resolves to no template
            TemplateError: If the body or one of its compositions fails
        """
        return self.render_result(name, variables).contents

    def render_result(self, name: str, variables: Optional[Mapping[str, Any]] = None) -> RenderResult:
        """Render a template and keep the value its body assigned to ``template.return_value``."""
        template = self.resolver.resolve(name)
        frame = RenderContext(name, dict(variables or {}))

        with self.composition.frame(frame):
            contents = self._execute(template, frame)
            contents = self.composition.complete(frame, contents)

        return RenderResult(contents, frame.return_value)

    def _execute(self, template: TemplateSource, frame: RenderContext) -> str:
        log = get_logger(__name__, template=template.name, depth=self.stack.depth)
        code = self._compile(template)
        namespace = self._namespace(template)

        with self.composition.recording(frame) as sink:
            receiver = TemplateReceiver(self.composition, frame)
            # reserved names shadow variables of the same name
            namespace["template"] = receiver
            namespace["echo"] = receiver.echo
            namespace["print"] = functools.partial(print, file=sink)
            log.debug(f"Executing {template.source_name} ({template.mode.value})")
            try:
                exec(code, namespace)
            except Exception:
                log.debug(f"Template {template.name} failed", exc_info=True)
                raise
            return sink.getvalue()

    def _namespace(self, template: TemplateSource) -> Dict[str, Any]:
        scope = self.stack.merged_variables(self.global_scope)
        namespace = {
            key: self.variable_class.create(key, value, template.mode, self)
            for key, value in scope.items()
        }
        namespace["__name__"] = f"safeplate.templates.{template.name}"
        return namespace

    def _compile(self, template: TemplateSource) -> CodeType:
        if self.cache is None:
            return compile_template(template)
        return self.cache.get_or_compile(template)

    # composition

    def extends(self, name: str, variables: Optional[Mapping[str, Any]] = None) -> None:
        """Declare the parent of the currently executing body."""
        self.composition.extends(name, variables)

    def include(self, name: str, variables: Optional[Mapping[str, Any]] = None) -> None:
        """Render a template into the output of the currently executing body."""
        self.composition.include(name, variables)

    # global scope

    def set(self, name: str, value: Any) -> None:
        """Set a global variable, visible to every render of this engine."""
        self.global_scope[name] = value

    def get(self, name: str) -> Any:
        """Raw value of a global variable, or None."""
        return self.global_scope.get(name)

    @staticmethod
    def check(value: Any) -> bool:
        """
        Truthiness test for raw and wrapped values alike.

        Wrapped values are always truthy for ``bool()``; this tests the
        value they wrap.
        """
        if isinstance(value, EscapedValue):
            return value.is_true()
        return bool(value)

    html_escape = staticmethod(html_escape)

    # templates

    def exists(self, name: str) -> bool:
        return self.resolver.exists(name)

    def resolve(self, name: str) -> TemplateSource:
        return self.resolver.resolve(name)

    def list_templates(self) -> List[str]:
        return self.resolver.list_templates()

    def clear_cache(self) -> None:
        if self.cache is not None:
            self.cache.invalidate()
