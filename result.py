from dataclasses import dataclass
from typing import Optional

from diagnostics import Diagnostic


@dataclass(frozen=True)
class Result:
    value: object

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class Outcome:
    """Resultado de procesar una entrada: o bien un Result, o bien un Diagnostic."""

    result: Optional[Result] = None
    diagnostic: Optional[Diagnostic] = None

    def __post_init__(self):
        if (self.result is None) == (self.diagnostic is None):
            raise ValueError("un Outcome lleva exactamente un Result o un Diagnostic")

    @property
    def ok(self):
        return self.diagnostic is None

    @classmethod
    def success(cls, result):
        return cls(result=result)

    @classmethod
    def failure(cls, diagnostic):
        return cls(diagnostic=diagnostic)
