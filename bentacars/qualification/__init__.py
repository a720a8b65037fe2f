from bentacars.qualification.completeness import (
    CompletenessStatus,
    compute_completeness,
    qualification_summary,
)

__all__ = [
    "CompletenessStatus",
    "compute_completeness",
    "qualification_summary",
]
