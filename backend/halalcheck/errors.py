"""
Error taxonomy for the analysis pipeline.
Per-ingredient and parse failures degrade inside the pipeline; only
ValidationError is meant to reach a caller.
"""


class HalalCheckError(Exception):
    """Base class for all pipeline errors."""


class UpstreamUnavailable(HalalCheckError):
    """Text-generation backend or reference store failed or timed out."""


class MalformedUpstreamReply(HalalCheckError):
    """Backend replied, but not with the JSON or fields we asked for."""


class ValidationError(HalalCheckError):
    """Caller-supplied input is empty or too large."""


class PersistenceFailure(HalalCheckError):
    """Writing an already-finished analysis failed."""
