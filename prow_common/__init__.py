"""
Prow Common module.

This module contains the job record model shared by anything that reads or
writes ProwJob records: the enumerations, the value types, the two pure
queries over them, the label constants and the wire codec.

The common module has no dependencies on other prow_* modules, making it
a pure domain layer that can be imported by any component.
"""

from .codec import decode_job, decode_job_list, dumps, encode_job, loads, loads_list
from .constants import CREATED_BY_PROW, PROW_JOB_ANNOTATION, PROW_JOB_TYPE_LABEL
from .errors import DecodeError
from .models import (
    ProwJob,
    ProwJobAgent,
    ProwJobSpec,
    ProwJobState,
    ProwJobStatus,
    ProwJobType,
    Pull,
    Refs,
    is_complete,
    render_refs,
)

__all__ = [
    "CREATED_BY_PROW",
    "PROW_JOB_ANNOTATION",
    "PROW_JOB_TYPE_LABEL",
    "DecodeError",
    "ProwJob",
    "ProwJobAgent",
    "ProwJobSpec",
    "ProwJobState",
    "ProwJobStatus",
    "ProwJobType",
    "Pull",
    "Refs",
    "decode_job",
    "decode_job_list",
    "dumps",
    "encode_job",
    "is_complete",
    "loads",
    "loads_list",
    "render_refs",
]
