"""
Tactica - Error Taxonomy
=========================

``CorpusUnavailable``
    The corpus could not be loaded (missing file, malformed records,
    inconsistent embedding dimensions) or was never loaded.  Fatal to
    every retrieval call; never retried.

``EmbeddingServiceFailure``
    The embedding backend could not embed the query.  The retrieval
    engine may degrade to keyword-only search (``DEGRADE_TO_KEYWORDS``);
    otherwise the error reaches the caller.

``GenerationServiceFailure``
    The text-generation backend failed.  Surfaced by the advisor and the
    simulator; retries belong to the caller.

An empty result set is *not* an error and has no exception type.
"""


class TacticaError(Exception):
    """Base class for all Tactica errors."""


class CorpusUnavailable(TacticaError):
    pass


class EmbeddingServiceFailure(TacticaError):
    pass


class GenerationServiceFailure(TacticaError):
    pass
