"""
Render frames and template composition.
"""
from .context import ContextStack, RenderContext, RenderState
from .composition import CONTENTS_VARIABLE, CompositionController, TemplateReceiver

__all__ = [
    'ContextStack',
    'RenderContext',
    'RenderState',
    'CONTENTS_VARIABLE',
    'CompositionController',
    'TemplateReceiver',
]
