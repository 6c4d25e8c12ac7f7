"""
SavedModel inference handles and the public loading API.

A SavedModelHandle is one signature of a loaded SavedModel MetaGraph. Handles
loaded from the same path and tag set share one native session through a
SessionRegistry; the session is released when the last of them is disposed.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..core.config import DEFAULT_SIGNATURE, DEFAULT_TAGS, load_config
from ..core.errors import (
    AlreadyDisposedError,
    ExecuteNotSupportedError,
    InputMismatchError,
    OutputCountMismatchError,
    UseAfterDisposeError,
)
from ..core.types import PredictConfig, SignatureDefEntry, TensorInfo
from ..loaders.inspector import get_meta_graphs_from_saved_model, get_signature_def_entry
from ..sessions.registry import SessionRegistry
from .inputs import NamedTensors, SingleTensor, TensorList, as_predict_inputs

logger = logging.getLogger(__name__)

_OUTPUT_INDEX_SUFFIX = re.compile(r":0$")


def strip_output_index(name: str) -> str:
    """'x:0' -> 'x'. Other suffixes such as ':1' are kept."""
    return _OUTPUT_INDEX_SUFFIX.sub("", name)


class SavedModelHandle:
    """
    A signature loaded from a SavedModel MetaGraph, ready for inference.

    Example:
        >>> model = load_saved_model("exported/1")
        >>> y = model.predict(np.ones((1, 3), dtype=np.float32))
        >>> model.dispose()
    """

    def __init__(
        self,
        handle_id: int,
        session_handle: int,
        signature: SignatureDefEntry,
        registry: SessionRegistry,
    ):
        self.handle_id = handle_id
        self.session_handle = session_handle
        self.signature = signature
        self._registry = registry
        self._disposed = False

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "live"
        return (
            f"SavedModelHandle(id={self.handle_id}, session={self.session_handle}, "
            f"inputs={list(self.signature.inputs)}, outputs={list(self.signature.outputs)}, {state})"
        )

    def __enter__(self) -> "SavedModelHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._disposed:
            self.dispose()

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------
    # Signature metadata
    # ------------------------------------------------------------

    @property
    def inputs(self) -> List[TensorInfo]:
        """Input tensor infos, with a trailing ':0' stripped from names."""
        return [
            info.with_name(strip_output_index(info.name))
            for info in self.signature.inputs.values()
        ]

    @property
    def outputs(self) -> List[TensorInfo]:
        """Output tensor infos, with a trailing ':0' stripped from names."""
        return [
            info.with_name(strip_output_index(info.name))
            for info in self.signature.outputs.values()
        ]

    @cached_property
    def output_node_names(self) -> Dict[str, str]:
        """Signature output key -> graph tensor name."""
        return {key: info.name for key, info in self.signature.outputs.items()}

    # ------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------

    def predict(
        self,
        inputs: Any,
        config: Optional[PredictConfig] = None,
    ) -> Union[Any, List[Any], Dict[str, Any]]:
        """
        Run the signature.

        Args:
            inputs: A single tensor, a list of tensors in declared input
                order, or a dict keyed by signature input names.
            config: Optional predict options.

        Returns:
            For a single tensor: the output tensor when the signature has
            exactly one output, else a list. For a list: a list. For a dict:
            a dict keyed by signature output names.

        Raises:
            UseAfterDisposeError: The handle was disposed.
            InputMismatchError: Dict keys differ from the signature inputs.
            OutputCountMismatchError: The backend returned the wrong number
                of outputs for a dict call.
        """
        if self._disposed:
            raise UseAfterDisposeError()

        config = config or PredictConfig()
        request = as_predict_inputs(inputs)
        start = time.perf_counter()

        if isinstance(request, SingleTensor):
            result = self._predict_single(request)
        elif isinstance(request, TensorList):
            result = self._predict_list(request)
        else:
            result = self._predict_named(request)

        if config.verbose:
            logger.info(
                "predict on session %d (%s) took %.3f ms",
                self.session_handle,
                type(request).__name__,
                (time.perf_counter() - start) * 1000,
            )
        return result

    def _run(self, tensors: List[Any], input_infos: List[TensorInfo], output_infos: List[TensorInfo]) -> List[Any]:
        logger.debug(
            "Running session %d: %d input(s) -> %d output(s)",
            self.session_handle, len(tensors), len(output_infos),
        )
        return list(
            self._registry.backend.run_graph(
                self.session_handle, tensors, input_infos, output_infos
            )
        )

    def _predict_single(self, request: SingleTensor):
        result = self._run(
            [request.tensor],
            list(self.signature.inputs.values()),
            list(self.signature.outputs.values()),
        )
        return result[0] if len(result) == 1 else result

    def _predict_list(self, request: TensorList) -> List[Any]:
        return self._run(
            list(request.tensors),
            list(self.signature.inputs.values()),
            list(self.signature.outputs.values()),
        )

    def _predict_named(self, request: NamedTensors) -> Dict[str, Any]:
        input_names = list(self.signature.inputs)
        if frozenset(input_names) != request.names:
            raise InputMismatchError(input_names, request.names)

        tensors = [request.tensors[name] for name in input_names]
        input_infos = [self.signature.inputs[name] for name in input_names]

        output_names = list(self.output_node_names)
        output_infos = [self.signature.outputs[name] for name in output_names]

        outputs = self._run(tensors, input_infos, output_infos)
        if len(outputs) != len(output_names):
            raise OutputCountMismatchError(len(outputs), len(output_names))

        return dict(zip(output_names, outputs))

    def execute(self, inputs: Any, outputs: Union[str, List[str]]):
        raise ExecuteNotSupportedError()

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    def dispose(self) -> None:
        """
        Release this handle. The native session is closed only if no other
        handle shares it.

        Raises:
            AlreadyDisposedError: On a second call.
        """
        if self._disposed:
            raise AlreadyDisposedError()
        self._disposed = True
        self._registry.release(self.handle_id)


# ------------------------------------------------------------
# Process-default registry
# ------------------------------------------------------------

_default_registry: Optional[SessionRegistry] = None
_default_lock = threading.Lock()


def get_default_registry() -> SessionRegistry:
    """Return the process-wide registry, creating it from config on first use."""
    global _default_registry
    with _default_lock:
        if _default_registry is None or _default_registry.closed:
            from ..backends import BackendRegistry

            config = load_config()
            _default_registry = SessionRegistry(BackendRegistry.get_backend(config.backend))
            logger.debug("Created default session registry on backend %s", config.backend)
        return _default_registry


def set_default_registry(registry: Optional[SessionRegistry]) -> None:
    global _default_registry
    with _default_lock:
        _default_registry = registry


def shutdown_default_registry() -> None:
    """Release every session held by the process-wide registry."""
    global _default_registry
    with _default_lock:
        registry, _default_registry = _default_registry, None
    if registry is not None:
        registry.shutdown()


# ------------------------------------------------------------
# Public API
# ------------------------------------------------------------

def load_saved_model(
    path: Union[str, Path],
    tags: Iterable[str] = DEFAULT_TAGS,
    signature: str = DEFAULT_SIGNATURE,
    registry: Optional[SessionRegistry] = None,
) -> SavedModelHandle:
    """
    Load a signature of a SavedModel for inference.

    Args:
        path: SavedModel directory.
        tags: Tag set of the MetaGraph to load.
        signature: Signature name within that MetaGraph.
        registry: Session registry; defaults to the process-wide one.

    Raises:
        DescriptorNotFoundError, CorruptDescriptorError, TagsNotFoundError,
        SignatureNotFoundError, UnsupportedDtypeError, BackendError
    """
    tags = list(tags)
    meta_graphs = get_meta_graphs_from_saved_model(path)
    signature_def = get_signature_def_entry(meta_graphs, tags, signature)

    registry = registry if registry is not None else get_default_registry()
    handle_id, record = registry.acquire(path, tags)

    return SavedModelHandle(handle_id, record.native_handle, signature_def, registry)


def count_loaded_models(registry: Optional[SessionRegistry] = None) -> int:
    """Number of native sessions open in the registry's backend."""
    registry = registry if registry is not None else get_default_registry()
    return registry.count_loaded_models()


__all__ = [
    "SavedModelHandle",
    "count_loaded_models",
    "get_default_registry",
    "load_saved_model",
    "set_default_registry",
    "shutdown_default_registry",
    "strip_output_index",
]
