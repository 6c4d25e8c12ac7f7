"""
Predict input variants.

`predict` accepts a single tensor, an ordered list of tensors, or a
name-keyed mapping. Raw values are classified once, at the boundary, into
one of three variants; each variant then has its own code path.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple, Union


@dataclass(frozen=True)
class SingleTensor:
    tensor: Any


@dataclass(frozen=True)
class TensorList:
    tensors: Tuple[Any, ...]


@dataclass(frozen=True)
class NamedTensors:
    tensors: Dict[str, Any]

    @property
    def names(self) -> frozenset:
        return frozenset(self.tensors)


PredictInputs = Union[SingleTensor, TensorList, NamedTensors]


def as_predict_inputs(inputs: Any) -> PredictInputs:
    """
    Classify raw predict inputs.

    Mappings become NamedTensors, lists and tuples become TensorList, and
    anything else (numpy arrays, framework tensors) is a SingleTensor.
    Already-classified variants pass through.
    """
    if isinstance(inputs, (SingleTensor, TensorList, NamedTensors)):
        return inputs
    if isinstance(inputs, Mapping):
        return NamedTensors(dict(inputs))
    if isinstance(inputs, (list, tuple)):
        return TensorList(tuple(inputs))
    return SingleTensor(inputs)


__all__ = [
    "NamedTensors",
    "PredictInputs",
    "SingleTensor",
    "TensorList",
    "as_predict_inputs",
]
