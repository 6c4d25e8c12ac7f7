"""
Shared pytest fixtures for smserve tests.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Tuple

import numpy as np
import pytest
from tensorflow.core.framework import types_pb2
from tensorflow.core.protobuf import meta_graph_pb2, saved_model_pb2

from smserve.backends.base import EnvironmentValidation, ExecutionBackend
from smserve.backends.registry import BackendRegistry
from smserve.core.errors import BackendError
from smserve.sessions.registry import SessionRegistry


# ------------------------------------------------------------
# Descriptor builders
# ------------------------------------------------------------

def make_tensor_info(
    name: str,
    dtype: int = types_pb2.DT_FLOAT,
    shape: Iterable[int] = (-1, 3),
    unknown_rank: bool = False,
) -> meta_graph_pb2.TensorInfo:
    info = meta_graph_pb2.TensorInfo(name=name, dtype=dtype)
    if unknown_rank:
        info.tensor_shape.unknown_rank = True
    else:
        for size in shape:
            info.tensor_shape.dim.add(size=size)
    return info


Signatures = Dict[str, Tuple[Dict[str, meta_graph_pb2.TensorInfo], Dict[str, meta_graph_pb2.TensorInfo]]]


def write_saved_model(directory: Path, meta_graphs: List[Tuple[List[str], Signatures]]) -> Path:
    """
    Write a saved_model.pb holding the given MetaGraphs.

    Each MetaGraph also gets the TensorFlow-internal init op signature,
    whose DT_INVALID output must never surface.
    """
    saved_model = saved_model_pb2.SavedModel(saved_model_schema_version=1)

    for tags, signatures in meta_graphs:
        meta_graph = saved_model.meta_graphs.add()
        meta_graph.meta_info_def.tags.extend(tags)

        init_op = meta_graph.signature_def["__saved_model_init_op"]
        init_op.outputs["__saved_model_init_op"].CopyFrom(
            meta_graph_pb2.TensorInfo(name="NoOp", dtype=types_pb2.DT_INVALID)
        )

        for signature_name, (inputs, outputs) in signatures.items():
            signature = meta_graph.signature_def[signature_name]
            signature.method_name = "tensorflow/serving/predict"
            for key, info in inputs.items():
                signature.inputs[key].CopyFrom(info)
            for key, info in outputs.items():
                signature.outputs[key].CopyFrom(info)

    directory.mkdir(parents=True, exist_ok=True)
    (directory / "saved_model.pb").write_bytes(saved_model.SerializeToString())
    return directory


# ------------------------------------------------------------
# Fake execution backend
# ------------------------------------------------------------

class FakeBackend(ExecutionBackend):
    """
    In-memory backend. Every output is the first input doubled.
    Native handles start at 100 so they never collide with handle ids.
    """

    def __init__(self):
        self.sessions: Dict[int, Tuple[str, str]] = {}
        self.loads: List[Tuple[str, str]] = []
        self.runs: List[dict] = []
        self.released: List[int] = []
        self.output_count = None
        self._next_handle = 100

    @property
    def name(self) -> str:
        return "fake"

    def validate_environment(self) -> EnvironmentValidation:
        return EnvironmentValidation(
            is_valid=True, backend_name=self.name, errors=[], warnings=[], info={}
        )

    def load_graph(self, path, tags_csv):
        handle = self._next_handle
        self._next_handle += 1
        self.sessions[handle] = (path, tags_csv)
        self.loads.append((path, tags_csv))
        return handle

    def run_graph(self, session_handle, inputs, input_infos, output_infos):
        if session_handle not in self.sessions:
            raise BackendError(f"Unknown session handle: {session_handle}", backend=self.name)
        self.runs.append({
            "session": session_handle,
            "inputs": list(inputs),
            "input_names": [info.name for info in input_infos],
            "output_names": [info.name for info in output_infos],
        })
        first = np.asarray(inputs[0])
        results = [first * 2 for _ in output_infos]
        if self.output_count is not None:
            results = results[:self.output_count]
        return results

    def release_session(self, session_handle):
        del self.sessions[session_handle]
        self.released.append(session_handle)

    def count_active_sessions(self):
        return len(self.sessions)


# ------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------

@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def registry(backend) -> SessionRegistry:
    registry = SessionRegistry(backend)
    yield registry
    registry.shutdown()


@pytest.fixture
def simple_model(tmp_path: Path) -> Path:
    """
    One MetaGraph tagged ['serve'] with 'serving_default':
    x:0 [-1, 3] DT_FLOAT -> y:0.
    """
    return write_saved_model(tmp_path / "simple", [
        (["serve"], {
            "serving_default": (
                {"x": make_tensor_info("x:0")},
                {"y": make_tensor_info("y:0")},
            ),
        }),
    ])


@pytest.fixture
def multi_model(tmp_path: Path) -> Path:
    """
    Two MetaGraphs:
    - ['serve']: 'serving_default' (a, b -> out1, out2) and 'classify' (c -> scores)
    - ['serve', 'gpu']: 'serving_default' (x -> y)
    """
    return write_saved_model(tmp_path / "multi", [
        (["serve"], {
            "serving_default": (
                {
                    "a": make_tensor_info("input_a:0"),
                    "b": make_tensor_info("input_b:0", dtype=types_pb2.DT_INT64, shape=(-1,)),
                },
                {
                    "out1": make_tensor_info("head:0"),
                    "out2": make_tensor_info("head:1"),
                },
            ),
            "classify": (
                {"c": make_tensor_info("tokens", dtype=types_pb2.DT_STRING, unknown_rank=True)},
                {"scores": make_tensor_info("scores:0")},
            ),
        }),
        (["serve", "gpu"], {
            "serving_default": (
                {"x": make_tensor_info("x:0")},
                {"y": make_tensor_info("y:0")},
            ),
        }),
    ])


@pytest.fixture
def fake_backend_registered():
    """Register FakeBackend under 'fake' in the BackendRegistry."""
    BackendRegistry.register("fake", FakeBackend)
    yield FakeBackend
    BackendRegistry.unregister("fake")
