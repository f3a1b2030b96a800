"""Split segment text into chunks that fit the speech endpoint's input limit."""

import re

from podcast_producer.constants import MAX_CHUNK_CHARS
from podcast_producer.errors import InvalidInputError

_SENTENCE_END_RE = re.compile(r"(?<=[.!?])\s+")


def split_text_into_chunks(text: str, max_length: int = MAX_CHUNK_CHARS) -> list[str]:
    """Split text into chunks of at most max_length characters.

    Breaks at sentence boundaries first. A sentence longer than the limit is
    split at spaces instead. A single word longer than the limit is returned
    verbatim as its own chunk rather than cut.
    """
    if max_length <= 0:
        raise InvalidInputError(f"max_length must be positive, got {max_length}")

    text = " ".join(text.split())
    if not text:
        return []
    if len(text) <= max_length:
        return [text]

    chunks = []
    current = ""

    for sentence in _SENTENCE_END_RE.split(text):
        if not sentence:
            continue

        if len(sentence) > max_length:
            # Flush what we have, then fall back to word accumulation
            if current:
                chunks.append(current)
                current = ""
            for word in sentence.split(" "):
                if current and len(current) + 1 + len(word) > max_length:
                    chunks.append(current)
                    current = word
                else:
                    current = f"{current} {word}" if current else word
        elif current and len(current) + 1 + len(sentence) > max_length:
            chunks.append(current)
            current = sentence
        else:
            current = f"{current} {sentence}" if current else sentence

    if current:
        chunks.append(current)

    return chunks
