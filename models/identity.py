"""Datenmodell für den aufgelösten Aufrufer (Pydantic v2)."""

from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    FACULTY = "faculty"
    STUDENT = "student"


class Identity(BaseModel):
    """Vom Auth-Kollaborateur aufgelöster Nutzer. Wird ungeprüft vertraut."""

    internal_user_id: int
    role: Role

    @property
    def is_faculty(self) -> bool:
        return self.role == Role.FACULTY


class User(BaseModel):
    """Ein Nutzer-Datensatz (Lehrende oder Studierende)."""

    id: int
    name: str
    email: str
    role: Role

    def to_identity(self) -> Identity:
        return Identity(internal_user_id=self.id, role=self.role)
