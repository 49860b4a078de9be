from dataclasses import dataclass
from typing import Literal, Protocol, Sequence


Role = Literal["system", "user"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


class CompletionClient(Protocol):
    async def complete(
        self, messages: Sequence[ChatMessage], *, model: str
    ) -> str: ...
