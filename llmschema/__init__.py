"""Request and response models for OpenAI-compatible chat, streaming, assistant, audio and batch APIs."""

__version__ = "0.1.0"
__all__ = ["assistant", "audio", "batch", "chat", "chat_stream"]