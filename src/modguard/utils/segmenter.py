import logging
from typing import List, NamedTuple

from langchain_text_splitters import RecursiveCharacterTextSplitter

from modguard.utils.helpers import split_into_words

logger = logging.getLogger(__name__)


class Segments(NamedTuple):
    words: List[str]
    chunks: List[str]


class TextSegmenter:
    """
    Splits sanitized text into word units and overlapping semantic chunks.

    Chunks come from a recursive splitter that only breaks on whitespace, so a
    token longer than ``chunk_size`` is kept whole instead of being cut
    mid-word. Consecutive chunks share up to ``chunk_overlap`` characters,
    which keeps phrases that straddle a boundary visible to one of them.
    """

    def __init__(self, chunk_size: int = 25, chunk_overlap: int = 8):
        if chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=[r"\s+"],
            is_separator_regex=True,
        )

    def split_into_semantics(self, text: str) -> List[str]:
        if len(split_into_words(text)) <= 1:
            return []
        chunks = [c for c in self.splitter.split_text(text) if c]
        logger.debug("[TextSegmenter] %d chunks from %d chars", len(chunks), len(text))
        return chunks

    def segment(self, text: str) -> Segments:
        return Segments(words=split_into_words(text), chunks=self.split_into_semantics(text))
