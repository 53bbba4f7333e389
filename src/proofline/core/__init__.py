"""Core: flattening, span translation and annotation sets."""

from .annotations import AnnotationSet
from .flatten import find_blocks, flatten
from .model import Annotation, FlatAnchor, FlatTextMap, Match
from .translate import translate, untranslate

__all__ = [
    "Annotation",
    "AnnotationSet",
    "FlatAnchor",
    "FlatTextMap",
    "Match",
    "find_blocks",
    "flatten",
    "translate",
    "untranslate",
]
