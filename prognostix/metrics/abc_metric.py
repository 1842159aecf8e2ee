from abc import ABC, abstractmethod
from typing import Any


class Metric(ABC):
    """Accumulate a per-match score and summarise it."""

    higher_is_better: bool

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self.default_name: list[str] = []

    @abstractmethod
    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        raise NotImplementedError()

    @abstractmethod
    def compute(self, *args: Any, **kwargs: Any) -> Any:
        raise NotImplementedError()

    def add_state(self, name: str) -> None:
        if hasattr(self, name):
            raise ValueError("Name state already added")
        setattr(self, name, [])
        self.default_name.append(name)

    def reset(self) -> None:
        for name in self.default_name:
            setattr(self, name, [])
