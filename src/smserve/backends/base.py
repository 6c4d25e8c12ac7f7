"""
Abstract execution backend interface.
All native engines (TensorFlow today) implement this.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from ..core.types import TensorInfo


@dataclass
class EnvironmentValidation:
    """Environment check result."""
    is_valid: bool
    backend_name: str
    errors: List[str]
    warnings: List[str]
    info: Dict[str, Any]


class ExecutionBackend(ABC):
    """
    Abstract execution backend.

    Owns native sessions and hands out opaque integer handles for them.
    Calls are synchronous; run_graph returns tensors positionally aligned
    with `output_infos`.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name (e.g., 'tensorflow')."""
        pass

    @abstractmethod
    def validate_environment(self) -> EnvironmentValidation:
        """
        Check if this backend can run on current system.
        Returns errors/warnings/info.
        """
        pass

    @abstractmethod
    def load_graph(self, path: str, tags_csv: str) -> int:
        """Load the MetaGraph tagged `tags_csv` from `path`; return a session handle."""
        pass

    @abstractmethod
    def run_graph(
        self,
        session_handle: int,
        inputs: Sequence[Any],
        input_infos: Sequence[TensorInfo],
        output_infos: Sequence[TensorInfo],
    ) -> List[Any]:
        """Feed `inputs` to `input_infos` and fetch `output_infos`."""
        pass

    @abstractmethod
    def release_session(self, session_handle: int) -> None:
        """Close a native session."""
        pass

    @abstractmethod
    def count_active_sessions(self) -> int:
        """Number of open native sessions."""
        pass
