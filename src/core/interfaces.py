"""
Base interfaces for the system
"""
from abc import ABC, abstractmethod
from typing import Any, List, Type


class IReferenceDataSource(ABC):
    """Read access to the current instances of a referenced entity type"""

    @abstractmethod
    def get_all(self, entity_type: Type[Any]) -> List[Any]:
        """Return every persisted instance of an entity type"""
        pass


class IPersistenceSink(ABC):
    """Write access for validated records"""

    @abstractmethod
    def add_all(self, records: List[Any]) -> int:
        """Stage a batch of records, return how many were staged"""
        pass

    @abstractmethod
    def commit(self):
        """Commit the staged batch"""
        pass

    @abstractmethod
    def rollback(self):
        """Discard the staged batch"""
        pass


class IEntityRepository(IReferenceDataSource, IPersistenceSink, ABC):
    """Repository used by the Excel service for both reads and writes"""
    pass
