from __future__ import annotations

from abc import ABC, abstractmethod


class Codec(ABC):
    """
    Minimal interface shared by the byte codecs.

    Both directions are pure functions over whole in-memory buffers:
      - compress never fails on bytes-like input
      - decompress raises MalformedArchiveError (or a subclass) on bad payloads
    """

    codec_id: str

    @abstractmethod
    def compress(self, data: bytes) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def decompress(self, payload: bytes) -> bytes:
        raise NotImplementedError

    def check(self, payload: bytes) -> None:
        """Cheap framing check without a full decode. Default: full decode."""
        self.decompress(payload)
