# core/patches.py

"""
Sparse update records.

Each entity that supports partial updates declares a patch class listing
the fields a caller may change. Fields left as None are not touched.

Example:
    patch = FeeStructurePatch(tuition_fee=Decimal('60000'))
    fee_structure.apply_patch(patch)   # saves only tuition_fee
"""


class SparsePatch:
    """Base class; subclasses set ``fields``"""

    fields = ()

    def __init__(self, **values):
        unknown = set(values) - set(self.fields)
        if unknown:
            raise ValueError(
                f"{self.__class__.__name__} does not accept: {', '.join(sorted(unknown))}"
            )
        for field in self.fields:
            setattr(self, field, values.get(field))

    @classmethod
    def from_dict(cls, data):
        """Build a patch from request data, ignoring keys it does not know"""
        return cls(**{key: value for key, value in data.items() if key in cls.fields})

    def changes(self):
        return {
            field: getattr(self, field)
            for field in self.fields
            if getattr(self, field) is not None
        }

    def is_empty(self):
        return not self.changes()

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.changes()}>"
