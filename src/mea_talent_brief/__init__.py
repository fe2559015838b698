"""Package for curating MEA HR news into a shareable talent-intelligence newsletter."""

__all__ = ["config", "models", "selection", "link_codec", "content_client", "workflow"]
