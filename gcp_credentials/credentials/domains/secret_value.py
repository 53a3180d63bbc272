"""Secret payload as either UTF-8 text or opaque binary."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, TypeVar, Union

T = TypeVar("T")


class SecretValue(ABC):
    """
    Closed tagged union over the two payload kinds a secret store returns.

    Only the ``Text`` and ``Binary`` subclasses below can be instantiated, so
    ``match`` always dispatches to exactly one handler.
    """

    __slots__ = ()

    def __init__(self):
        if type(self) not in (Text, Binary):
            raise TypeError("SecretValue is either Text or Binary")

    @staticmethod
    def text(value: str) -> "Text":
        return Text(value)

    @staticmethod
    def binary(value: bytes) -> "Binary":
        return Binary(value)

    @staticmethod
    def from_payload(data: bytes) -> Union["Text", "Binary"]:
        """
        Wrap a raw payload from a store that does not separate strings from binaries.

        Args:
            data: Raw payload bytes

        Returns:
            Text if the payload is valid UTF-8, Binary otherwise
        """
        try:
            return Text(data.decode("UTF-8"))
        except UnicodeDecodeError:
            return Binary(data)

    @abstractmethod
    def match(self, on_text: Callable[[str], T], on_binary: Callable[[bytes], T]) -> T:
        ...


@dataclass(frozen=True)
class Text(SecretValue):
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise TypeError(f"Text secret must be str, got {type(self.value).__name__}")

    def match(self, on_text: Callable[[str], T], on_binary: Callable[[bytes], T]) -> T:
        return on_text(self.value)

    def __repr__(self):
        return "Text(****)"


@dataclass(frozen=True)
class Binary(SecretValue):
    value: bytes

    def __post_init__(self):
        if not isinstance(self.value, (bytes, bytearray)):
            raise TypeError(f"Binary secret must be bytes, got {type(self.value).__name__}")
        # bytearray is mutable; keep an immutable copy
        object.__setattr__(self, "value", bytes(self.value))

    def match(self, on_text: Callable[[str], T], on_binary: Callable[[bytes], T]) -> T:
        return on_binary(self.value)

    def __repr__(self):
        return f"Binary({len(self.value)} bytes)"
