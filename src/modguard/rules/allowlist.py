import logging

from modguard.core.config_types import AllowlistTable

logger = logging.getLogger(__name__)


class AllowlistPolicy:
    """
    Two independent exemptions:

    - general: the token is safe everywhere; word units in this set are never
      sent to the oracle.
    - context-specific: a label surfaced by a word match is dropped when the
      full message contains one of its allowed contexts ("black" in
      "black belt").
    """

    def __init__(self, table: AllowlistTable):
        self.table = table

    def is_generally_allowed(self, token: str) -> bool:
        return token in self.table.general

    def is_exempt(self, label: str, full_context: str) -> bool:
        allowed_contexts = self.table.context_specific.get(label)
        if not allowed_contexts:
            return False
        for allowed in allowed_contexts:
            if allowed in full_context:
                logger.debug("[AllowlistPolicy] '%s' exempt via context '%s'", label, allowed)
                return True
        return False
