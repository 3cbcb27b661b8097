from .base import Base, BaseModel, TimeStamp, Versioned

__all__ = [
    "Base",
    "BaseModel",
    "TimeStamp",
    "Versioned",
]
