"""Base protocol definitions for the generative backend.

Using Protocol instead of ABC allows duck-typing: any class with matching
method signatures (including test fakes) automatically conforms.
"""

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from legendstudio.models.advisor import EditingSuggestion
from legendstudio.models.images import GeneratedImage, UploadedImage
from legendstudio.models.video import VeoHistoryItem, VeoParams

ProgressCallback = Callable[[str], None]


@runtime_checkable
class GenerationBackendProtocol(Protocol):
    """Every operation the studio needs from the generative service.

    Implementations raise ``BackendError`` on service failure.
    """

    async def generate_images(
        self,
        prompt: str,
        aspect_ratio: str,
        reference_images: Sequence[UploadedImage],
        count: int,
    ) -> list[GeneratedImage]:
        """Generate ``count`` image variants conditioned on the references."""
        ...

    async def remove_background(self, image: UploadedImage, green_screen: bool) -> str:
        """Return the image with its background removed, as a data URL."""
        ...

    async def upscale_image(self, image: UploadedImage) -> str:
        """Return an upscaled copy of the image, as a data URL."""
        ...

    async def zoom_out_image(self, image: UploadedImage) -> str:
        """Return the image outpainted to show a wider view, as a data URL."""
        ...

    async def analyze_image(self, image: UploadedImage) -> str:
        """Describe the image as a reusable prompt."""
        ...

    async def get_editing_suggestion(self, image: UploadedImage) -> EditingSuggestion:
        """Analyze the image and propose an edit."""
        ...

    async def get_batch_suggestions(self, images: Sequence[UploadedImage]) -> list[str]:
        """One short suggestion per image, in input order."""
        ...

    async def optimize_prompt(self, text: str) -> str:
        """Rewrite a prompt to be more effective."""
        ...

    async def inspire_prompt(self) -> str:
        """Invent a fresh prompt idea."""
        ...

    async def generate_video(
        self,
        params: VeoParams,
        progress: ProgressCallback | None = None,
    ) -> VeoHistoryItem:
        """Generate a video clip and return its history record."""
        ...
