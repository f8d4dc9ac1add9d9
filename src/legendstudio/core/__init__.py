"""Core studio logic: modes, prompt composition, advisor and notifications.

``Session`` lives in ``legendstudio.core.session`` and is imported from
there; it depends on the orchestrators, which depend on this package.
"""

from .advisor import AdvisorEngine
from .composer import PromptComposer
from .modes import AppMode, ModeController
from .toasts import ToastCenter

__all__ = [
    "AdvisorEngine",
    "AppMode",
    "ModeController",
    "PromptComposer",
    "ToastCenter",
]
