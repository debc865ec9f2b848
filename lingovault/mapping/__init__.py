"""
Mapping layer: record -> resolved fields -> repaired fields.
"""

from lingovault.mapping.repair import HeuristicRepair, RepairedFields, extract_tags_and_meaning
from lingovault.mapping.resolver import FieldResolver, ResolvedFields

__all__ = [
    "FieldResolver",
    "ResolvedFields",
    "HeuristicRepair",
    "RepairedFields",
    "extract_tags_and_meaning",
]
