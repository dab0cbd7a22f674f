"""Cache keys for verified credentials.

The key type decides the lookup: an EIA reference for EMCC, a
``NAME_QUALIFIER`` composite for ICF (ICF publishes no stable member number).
The ICF URL path qualifies the name with the claimed location, the name path
with the claimed credential level.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from accredit.models import AccreditationBody
from accredit.validation.identifiers import normalize_eia_reference


@dataclass(frozen=True)
class EmccKey:
    reference: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "reference", normalize_eia_reference(self.reference))

    @property
    def body(self) -> AccreditationBody:
        return AccreditationBody.EMCC

    @property
    def credential_number(self) -> str:
        return self.reference


@dataclass(frozen=True)
class IcfKey:
    name: str
    qualifier: str = ""

    @property
    def body(self) -> AccreditationBody:
        return AccreditationBody.ICF

    @property
    def credential_number(self) -> str:
        return f"{self.name.strip().upper()}_{(self.qualifier or '').strip().upper()}"


CacheKey = Union[EmccKey, IcfKey]
