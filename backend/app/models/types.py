import enum
from typing import Type

from sqlalchemy import Enum as SAEnum


class CaseInsensitiveEnum(SAEnum):
    """Enum column stored by value that accepts any casing on write and read.

    Values coming from forms or legacy rows ("Published", " PENDING ") are
    normalized to the lowercase enum value before hitting the database.
    """

    def __init__(self, enum_cls: Type[enum.Enum], **kwargs):
        self._enum_cls = enum_cls
        self._enum_kwargs = kwargs.copy()
        kwargs.setdefault("values_callable", lambda e: [m.value for m in e])
        kwargs.setdefault("native_enum", False)
        kwargs.setdefault("validate_strings", True)
        kwargs.setdefault("length", 32)
        super().__init__(enum_cls, **kwargs)

    def adapt(self, impltype, **kw):
        params = {**self._enum_kwargs, **kw}
        return CaseInsensitiveEnum(self._enum_cls, **params)

    @staticmethod
    def _normalize(value):
        if isinstance(value, enum.Enum):
            return value.value
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def bind_processor(self, dialect):
        parent = super().bind_processor(dialect)

        def process(value):
            if value is None:
                return None
            value = self._normalize(value)
            return parent(value) if parent else value

        return process

    def result_processor(self, dialect, coltype):
        parent = super().result_processor(dialect, coltype)

        def process(value):
            if value is None:
                return None
            value = self._normalize(value)
            return parent(value) if parent else value

        return process
