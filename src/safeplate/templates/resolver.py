"""
Template source resolution.

A logical template name is probed under an ordered list of suffixes; the
first suffix with an existing source wins and fixes the escape mode of
the render call. Sources come from any jinja2 loader, so templates can
live on disk (``FileSystemLoader``), in memory (``DictLoader``) or in a
package (``PackageLoader``).
"""
import logging
from pathlib import Path
from typing import Callable, List, NamedTuple, Optional, Sequence, Union

from jinja2 import BaseLoader, ChoiceLoader, Environment, FileSystemLoader, TemplateNotFound

from ..config.configuration import DEFAULT_SUFFIXES, SuffixRule
from ..error.exceptions import ErrorContext, TemplateNotFoundError
from ..variables.escape import EscapeMode

logger = logging.getLogger(__name__)

class TemplateSource(NamedTuple):
    """A resolved template."""
    name: str
    source_name: str
    source: str
    filename: Optional[str]
    mode: EscapeMode
    uptodate: Optional[Callable[[], bool]]

class TemplateResolver:
    """Resolves logical template names to sources and escape modes."""

    def __init__(self, loader: BaseLoader, suffixes: Optional[Sequence[SuffixRule]] = None):
        """
        Initialize the resolver.

        Args:
            loader: jinja2 loader providing template sources
            suffixes: Suffix conventions in order of precedence
        """
        self.suffixes: List[SuffixRule] = list(suffixes or DEFAULT_SUFFIXES)
        # the environment is only used as the loader's owner, never to render
        self.env = Environment(loader=loader, autoescape=False)

    @classmethod
    def from_directories(
        cls,
        template_dirs: Sequence[Union[str, Path]],
        suffixes: Optional[Sequence[SuffixRule]] = None,
        encoding: str = "utf-8"
    ) -> "TemplateResolver":
        """
        Create a resolver over template directories, searched in order.

        Args:
            template_dirs: Directories to search
            suffixes: Suffix conventions in order of precedence
            encoding: Source encoding
        """
        loaders = [FileSystemLoader(str(path), encoding=encoding) for path in template_dirs]
        loader = loaders[0] if len(loaders) == 1 else ChoiceLoader(loaders)
        logger.debug(f"Template resolver over directories: {[str(path) for path in template_dirs]}")
        return cls(loader, suffixes)

    @property
    def loader(self) -> BaseLoader:
        return self.env.loader

    def resolve(self, name: str) -> TemplateSource:
        """
        Resolve a logical name.

        Args:
            name: Template name without suffix

        Returns:
            The first existing source in suffix order

        Raises:
            TemplateNotFoundError: If no suffix matches an existing source
        """
        tried = []
        for rule in self.suffixes:
            source_name = f"{name}{rule.suffix}"
            tried.append(source_name)
            try:
                source, filename, uptodate = self.loader.get_source(self.env, source_name)
            except TemplateNotFound:
                continue
            logger.debug(f"Resolved template {name} to {filename or source_name} ({rule.mode.value})")
            return TemplateSource(name, source_name, source, filename, rule.mode, uptodate)

        raise TemplateNotFoundError(
            name,
            tried,
            context=ErrorContext("TemplateResolver", "resolve", template=name),
        )

    def exists(self, name: str) -> bool:
        """Check if a logical name resolves."""
        try:
            self.resolve(name)
            return True
        except TemplateNotFoundError:
            return False

    def list_templates(self) -> List[str]:
        """
        Logical names of all templates the loader can list.

        A source matching several suffixes is reported under the longest one.
        """
        names = set()
        by_length = sorted(self.suffixes, key=lambda rule: len(rule.suffix), reverse=True)
        for source_name in self.loader.list_templates():
            for rule in by_length:
                if source_name.endswith(rule.suffix):
                    names.add(source_name[: -len(rule.suffix)])
                    break
        return sorted(names)
