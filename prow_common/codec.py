"""
Wire codec for ProwJob records.

Converts between the model dataclasses and the JSON-compatible mapping other
components store and exchange. Every field is optional on the wire: an absent
key decodes to the field's zero value, and zero values are left out when
encoding. Anything malformed is reported as a DecodeError naming the path of
the offending field.
"""

import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, TypeVar

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
    is_zero_time,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

JOB_KEYS = frozenset({"apiVersion", "kind", "metadata", "spec", "status"})
SPEC_KEYS = frozenset(
    {
        "type",
        "agent",
        "job",
        "refs",
        "report",
        "context",
        "rerun_command",
        "max_concurrency",
        "pod_spec",
        "run_after_success",
    }
)
STATUS_KEYS = frozenset(
    {
        "startTime",
        "completionTime",
        "state",
        "description",
        "url",
        "pod_name",
        "build_id",
    }
)
REFS_KEYS = frozenset({"org", "repo", "base_ref", "base_sha", "pulls"})
PULL_KEYS = frozenset({"number", "author", "sha"})


# ============================================================================
# Encoding
# ============================================================================


def format_time(value: datetime) -> str:
    """Format a timestamp as RFC 3339, using the Z suffix for UTC."""
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def encode_pull(pull: Pull) -> dict[str, Any]:
    result: dict[str, Any] = {}
    if pull.number:
        result["number"] = pull.number
    if pull.author:
        result["author"] = pull.author
    if pull.sha:
        result["sha"] = pull.sha
    return result


def encode_refs(refs: Refs) -> dict[str, Any]:
    """Convert refs to wire format, keeping pulls in stored order."""
    result: dict[str, Any] = {}
    if refs.org:
        result["org"] = refs.org
    if refs.repo:
        result["repo"] = refs.repo
    if refs.base_ref:
        result["base_ref"] = refs.base_ref
    if refs.base_sha:
        result["base_sha"] = refs.base_sha
    if refs.pulls:
        result["pulls"] = [encode_pull(pull) for pull in refs.pulls]
    return result


def encode_spec(spec: ProwJobSpec) -> dict[str, Any]:
    """Convert a job spec (and its run_after_success tree) to wire format."""
    result: dict[str, Any] = {}
    if spec.type is not None:
        result["type"] = spec.type.value
    if spec.agent is not None:
        result["agent"] = spec.agent.value
    if spec.job:
        result["job"] = spec.job
    if spec.refs is not None:
        result["refs"] = encode_refs(spec.refs)
    if spec.report:
        result["report"] = spec.report
    if spec.context:
        result["context"] = spec.context
    if spec.rerun_command:
        result["rerun_command"] = spec.rerun_command
    if spec.max_concurrency:
        result["max_concurrency"] = spec.max_concurrency
    if spec.pod_spec:
        result["pod_spec"] = dict(spec.pod_spec)
    if spec.run_after_success:
        result["run_after_success"] = [
            encode_spec(child) for child in spec.run_after_success
        ]
    return result


def encode_status(status: ProwJobStatus) -> dict[str, Any]:
    """Convert a job status to wire format."""
    result: dict[str, Any] = {}
    if status.start_time is not None:
        result["startTime"] = format_time(status.start_time)
    if status.completion_time is not None:
        result["completionTime"] = format_time(status.completion_time)
    if status.state is not None:
        result["state"] = status.state.value
    if status.description:
        result["description"] = status.description
    if status.url:
        result["url"] = status.url
    if status.pod_name:
        result["pod_name"] = status.pod_name
    if status.build_id:
        result["build_id"] = status.build_id
    return result


def encode_job(job: ProwJob) -> dict[str, Any]:
    """
    Convert a job record to wire format.

    metadata, spec and status are always present; everything else is
    omitted when it holds its zero value.
    """
    result: dict[str, Any] = {}
    if job.api_version:
        result["apiVersion"] = job.api_version
    if job.kind:
        result["kind"] = job.kind
    result["metadata"] = dict(job.metadata)
    result["spec"] = encode_spec(job.spec)
    result["status"] = encode_status(job.status)
    return result


def dumps(job: ProwJob, indent: int | None = None) -> str:
    """Serialize a job record to JSON text."""
    return json.dumps(encode_job(job), indent=indent)


# ============================================================================
# Decoding
# ============================================================================


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _describe(value: Any) -> str:
    if value is None:
        return "null"
    return type(value).__name__


def _expect_mapping(value: Any, path: str, keys: frozenset[str]) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(path, f"expected an object, got {_describe(value)}")
    unknown = sorted(k for k in value if k not in keys)
    if unknown:
        logger.debug(f"Ignoring unknown fields at {path or '<root>'}: {unknown}")
    return value


def _get_str(data: dict[str, Any], key: str, path: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(
            _join(path, key), f"expected a string, got {_describe(value)}"
        )
    return value


def _get_int(data: dict[str, Any], key: str, path: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    # bool is an int subclass but never a valid integer on the wire
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(
            _join(path, key), f"expected an integer, got {_describe(value)}"
        )
    return value


def _get_bool(data: dict[str, Any], key: str, path: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DecodeError(
            _join(path, key), f"expected a boolean, got {_describe(value)}"
        )
    return value


def _get_enum(
    data: dict[str, Any], key: str, path: str, enum_cls: type[E]
) -> E | None:
    value = _get_str(data, key, path)
    if not value:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise DecodeError(
            _join(path, key), f"invalid value {value!r} (expected one of: {allowed})"
        ) from None


def _get_time(data: dict[str, Any], key: str, path: str) -> datetime | None:
    value = _get_str(data, key, path)
    if not value:
        return None
    text = value[:-1] + "+00:00" if value[-1] in "Zz" else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise DecodeError(_join(path, key), f"invalid timestamp {value!r}") from None
    if is_zero_time(parsed):
        return None
    return parsed


def _get_list(data: dict[str, Any], key: str, path: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeError(
            _join(path, key), f"expected an array, got {_describe(value)}"
        )
    return value


def _get_opaque(data: dict[str, Any], key: str, path: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(
            _join(path, key), f"expected an object, got {_describe(value)}"
        )
    return dict(value)


def decode_pull(value: Any, path: str = "") -> Pull:
    data = _expect_mapping(value, path, PULL_KEYS)
    return Pull(
        number=_get_int(data, "number", path),
        author=_get_str(data, "author", path),
        sha=_get_str(data, "sha", path),
    )


def decode_refs(value: Any, path: str = "") -> Refs:
    """Build Refs from wire format, keeping pulls in their listed order."""
    data = _expect_mapping(value, path, REFS_KEYS)
    pulls_path = _join(path, "pulls")
    return Refs(
        org=_get_str(data, "org", path),
        repo=_get_str(data, "repo", path),
        base_ref=_get_str(data, "base_ref", path),
        base_sha=_get_str(data, "base_sha", path),
        pulls=tuple(
            decode_pull(item, f"{pulls_path}[{i}]")
            for i, item in enumerate(_get_list(data, "pulls", path))
        ),
    )


def decode_spec(value: Any, path: str = "") -> ProwJobSpec:
    """Build a ProwJobSpec from wire format, recursing into run_after_success."""
    data = _expect_mapping(value, path, SPEC_KEYS)

    max_concurrency = _get_int(data, "max_concurrency", path)
    if max_concurrency < 0:
        raise DecodeError(
            _join(path, "max_concurrency"),
            f"must be non-negative, got {max_concurrency}",
        )

    refs = None
    if data.get("refs") is not None:
        refs = decode_refs(data["refs"], _join(path, "refs"))

    children_path = _join(path, "run_after_success")
    return ProwJobSpec(
        type=_get_enum(data, "type", path, ProwJobType),
        agent=_get_enum(data, "agent", path, ProwJobAgent),
        job=_get_str(data, "job", path),
        refs=refs,
        report=_get_bool(data, "report", path),
        context=_get_str(data, "context", path),
        rerun_command=_get_str(data, "rerun_command", path),
        max_concurrency=max_concurrency,
        pod_spec=_get_opaque(data, "pod_spec", path),
        run_after_success=tuple(
            decode_spec(item, f"{children_path}[{i}]")
            for i, item in enumerate(_get_list(data, "run_after_success", path))
        ),
    )


def decode_status(value: Any, path: str = "") -> ProwJobStatus:
    """Build a ProwJobStatus from wire format."""
    data = _expect_mapping(value, path, STATUS_KEYS)
    return ProwJobStatus(
        start_time=_get_time(data, "startTime", path),
        completion_time=_get_time(data, "completionTime", path),
        state=_get_enum(data, "state", path, ProwJobState),
        description=_get_str(data, "description", path),
        url=_get_str(data, "url", path),
        pod_name=_get_str(data, "pod_name", path),
        build_id=_get_str(data, "build_id", path),
    )


def decode_job(value: Any, path: str = "") -> ProwJob:
    """
    Build a job record from wire format.

    Args:
        value: Decoded JSON document (normally a dict)
        path: Path of the document within a larger one, used in errors

    Returns:
        ProwJob with every absent field at its zero value

    Raises:
        DecodeError: If a field has the wrong type, a timestamp is malformed,
            an enum value is not recognized or max_concurrency is negative
    """
    data = _expect_mapping(value, path, JOB_KEYS)

    spec = ProwJobSpec()
    if data.get("spec") is not None:
        spec = decode_spec(data["spec"], _join(path, "spec"))

    status = ProwJobStatus()
    if data.get("status") is not None:
        status = decode_status(data["status"], _join(path, "status"))

    job = ProwJob(
        api_version=_get_str(data, "apiVersion", path),
        kind=_get_str(data, "kind", path),
        metadata=_get_opaque(data, "metadata", path),
        spec=spec,
        status=status,
    )
    logger.debug(f"Decoded job record {job.spec.job or '(unnamed)'}")
    return job


def decode_job_list(value: Any) -> list[ProwJob]:
    """
    Decode either a single job record or a list document ({"items": [...]}).

    Returns:
        Job records in document order
    """
    if isinstance(value, dict) and "items" in value:
        items = _get_list(value, "items", "")
        return [decode_job(item, f"items[{i}]") for i, item in enumerate(items)]
    return [decode_job(value)]


def _parse_json(text: str | bytes) -> Any:
    try:
        return json.loads(text)
    except UnicodeDecodeError as e:
        raise DecodeError("", f"invalid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise DecodeError("", f"invalid JSON: {e}") from e


def loads(text: str | bytes) -> ProwJob:
    """
    Parse JSON text into a job record.

    Raises:
        DecodeError: If the text is not valid JSON or does not describe a job
    """
    return decode_job(_parse_json(text))


def loads_list(text: str | bytes) -> list[ProwJob]:
    """
    Parse JSON text holding one job record or a list document.

    Raises:
        DecodeError: If the text is not valid JSON or any record is invalid
    """
    return decode_job_list(_parse_json(text))
