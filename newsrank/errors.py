"""Exceptions raised by the retrieval engine and its adapters"""


class NewsRankError(Exception):
    """Base class for all News Rank errors"""


class ProviderError(NewsRankError):
    """
    An external collaborator (embedding model, vector index, corpus or
    article store) failed or was unreachable.

    Fatal for single-method searches. In hybrid mode the orchestrator catches
    it to fall back to the surviving method.
    """

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")
