from .mood import Mood, classify_mood
from .preprocessing import PreprocessResult, clean_value, normalize, preprocess

__all__ = [
    "Mood",
    "classify_mood",
    "PreprocessResult",
    "clean_value",
    "normalize",
    "preprocess",
]
