# core/interfaces/compliance.py
from abc import ABC, abstractmethod
from typing import Optional


class ComplianceProvider(ABC):
    """What modules need to know about an LPAR's package compliance."""

    @abstractmethod
    def lpar_summary(self, db, lpar_id: int) -> Optional[dict]: ...

