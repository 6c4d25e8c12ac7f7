"""
TensorFlow execution backend.

Each native session is a `tf.compat.v1.Session` over its own `tf.Graph`,
populated by the SavedModel loader for one tag set. Tensors cross the
boundary as numpy arrays.
"""

import logging
import platform
import threading
from typing import Any, Dict, List, Sequence

import numpy as np

from ..base import EnvironmentValidation, ExecutionBackend
from ...core.errors import BackendError
from ...core.types import TensorInfo

logger = logging.getLogger(__name__)


def _fetch_name(info: TensorInfo) -> str:
    # Graph tensors are addressed as "<op>:<index>"; bare op names mean index 0.
    return info.name if ":" in info.name else f"{info.name}:0"


class TensorFlowBackend(ExecutionBackend):
    """TensorFlow session backend for SavedModel MetaGraphs."""

    def __init__(self):
        self._sessions: Dict[int, Any] = {}
        self._next_handle = 0
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "tensorflow"

    def validate_environment(self) -> EnvironmentValidation:
        """Check if TensorFlow can run."""
        errors = []
        warnings = []
        info = {}

        info["platform"] = f"{platform.system()} {platform.release()}"
        info["architecture"] = platform.machine()

        try:
            import tensorflow as tf
            info["tensorflow"] = tf.__version__

            gpus = tf.config.list_physical_devices("GPU")
            info["gpus"] = len(gpus)
            if not gpus:
                warnings.append("No GPU visible to TensorFlow; running on CPU")
        except ImportError:
            errors.append("tensorflow not installed. Run: pip install tensorflow")

        info["numpy"] = np.__version__

        return EnvironmentValidation(
            is_valid=len(errors) == 0,
            backend_name=self.name,
            errors=errors,
            warnings=warnings,
            info=info,
        )

    def load_graph(self, path: str, tags_csv: str) -> int:
        import tensorflow as tf

        tags = [t for t in tags_csv.split(",") if t]
        graph = tf.Graph()
        session = tf.compat.v1.Session(graph=graph)
        try:
            tf.compat.v1.saved_model.loader.load(session, tags, path)
        except Exception as exc:
            session.close()
            raise BackendError(
                f"Failed to load SavedModel '{path}' with tags '{tags_csv}': {exc}",
                backend=self.name,
            ) from exc

        with self._lock:
            handle = self._next_handle
            self._next_handle += 1
            self._sessions[handle] = session

        logger.debug("Opened TensorFlow session %d for %s [%s]", handle, path, tags_csv)
        return handle

    def run_graph(
        self,
        session_handle: int,
        inputs: Sequence[Any],
        input_infos: Sequence[TensorInfo],
        output_infos: Sequence[TensorInfo],
    ) -> List[Any]:
        session = self._get_session(session_handle)

        if len(inputs) != len(input_infos):
            raise BackendError(
                f"Expected {len(input_infos)} input tensors, got {len(inputs)}",
                backend=self.name,
            )

        feed_dict = {
            _fetch_name(info): np.asarray(value)
            for info, value in zip(input_infos, inputs)
        }
        fetches = [_fetch_name(info) for info in output_infos]

        try:
            results = session.run(fetches, feed_dict=feed_dict)
        except Exception as exc:
            raise BackendError(
                f"Session {session_handle} run failed: {exc}",
                backend=self.name,
            ) from exc

        return [np.asarray(r) for r in results]

    def release_session(self, session_handle: int) -> None:
        with self._lock:
            session = self._sessions.pop(session_handle, None)
        if session is None:
            raise BackendError(
                f"Unknown session handle: {session_handle}", backend=self.name
            )
        session.close()
        logger.debug("Closed TensorFlow session %d", session_handle)

    def count_active_sessions(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _get_session(self, session_handle: int):
        with self._lock:
            session = self._sessions.get(session_handle)
        if session is None:
            raise BackendError(
                f"Unknown session handle: {session_handle}", backend=self.name
            )
        return session
