from inkwell.reference_index.base import ReferenceIndex
from inkwell.reference_index.local import LocalReferenceIndex

__all__ = ["LocalReferenceIndex", "ReferenceIndex"]
