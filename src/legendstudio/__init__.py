"""Legend Studio: structured prompt composition and Gemini/Veo generation."""

__version__ = "0.1.0"
