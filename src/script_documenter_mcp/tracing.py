"""Optional MLflow tracing for documentation runs.

A run traced end to end looks like::

    project_analyze (TOOL)
      document <file> (CHAIN)   one per processed file
        generate_content        from mlflow.gemini.autolog()

Tool entrypoints use :func:`trace`; the pipeline wraps each file in
:func:`file_span`. Both are no-ops unless ``mlflow-tracing`` is installed
and ``MLFLOW_TRACKING_URI`` is set (``GEMINI_TRACING_ENABLED=false``
switches it off regardless).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models.project import ProjectFile

logger = logging.getLogger(__name__)

try:
    import mlflow
    import mlflow.gemini

    _HAS_MLFLOW = True
except ImportError:
    _HAS_MLFLOW = False


def is_enabled() -> bool:
    if not _HAS_MLFLOW:
        return False
    from .config import get_config

    return get_config().tracing_enabled


def trace(
    func: Callable | None = None,
    *,
    name: str | None = None,
    span_type: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Callable:
    """``@mlflow.trace`` when tracing is on, identity otherwise."""
    if not is_enabled():
        return func if func is not None else (lambda f: f)
    return mlflow.trace(func, name=name, span_type=span_type, attributes=attributes)


def _outcome_attributes(file: ProjectFile) -> dict[str, Any]:
    attrs: dict[str, Any] = {
        "file.state": file.state,
        "file.has_changes": file.has_changes,
    }
    if file.error is not None:
        attrs["file.error"] = file.error
    return attrs


@contextmanager
def file_span(file: ProjectFile, doc_language: str, index: int, total: int) -> Iterator[None]:
    """Span around one file's documentation step.

    Inputs carry the file's identity; attributes set on exit carry its
    outcome as recorded on *file* (documented, failed, or untouched when
    the step raised).
    """
    if not is_enabled():
        yield
        return

    with mlflow.start_span(
        name=f"document {file.name}",
        span_type="CHAIN",
        attributes={
            "file.name": file.name,
            "file.language": file.language,
            "doc_language": doc_language,
            "position": f"{index}/{total}",
        },
    ) as span:
        span.set_inputs({"name": file.name, "language": file.language, "chars": len(file.content)})
        try:
            yield
        finally:
            span.set_attributes(_outcome_attributes(file))
            if file.documented_content is not None:
                span.set_outputs({"chars": len(file.documented_content)})


def setup() -> None:
    """Point MLflow at the configured tracking server and autolog Gemini calls.

    A failing tracking server only disables tracing; the server still starts.
    """
    if not is_enabled():
        return

    from .config import get_config

    cfg = get_config()
    try:
        mlflow.set_tracking_uri(cfg.mlflow_tracking_uri)
        mlflow.set_experiment(cfg.mlflow_experiment_name)
        mlflow.gemini.autolog()
        logger.info(
            "MLflow tracing enabled (uri=%s, experiment=%s)",
            cfg.mlflow_tracking_uri,
            cfg.mlflow_experiment_name,
        )
    except Exception:
        logger.warning("MLflow tracing setup failed, documentation runs will not be traced", exc_info=True)


def shutdown() -> None:
    if not is_enabled():
        return

    try:
        mlflow.flush_trace_async_logging()
        logger.info("MLflow traces flushed")
    except Exception:
        logger.warning("MLflow trace flush failed", exc_info=True)
