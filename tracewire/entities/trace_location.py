"""Where a trace is stored.

Locations are a tagged union keyed by the wire ``type`` field. New variants
register themselves in ``_DECODERS``; unknown types decode as an experiment
location so that older clients keep working against newer stores.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from tracewire.entities._compat import as_optional_str, as_str
from tracewire.schemas import TraceLocationPayload, validate_payload

MLFLOW_EXPERIMENT = 'MLFLOW_EXPERIMENT'
INFERENCE_TABLE = 'INFERENCE_TABLE'

DEFAULT_EXPERIMENT_ID = '0'


class TraceLocation(ABC):
    """Base class of every trace location variant."""

    type: str

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError

    @staticmethod
    def from_dict(data: Mapping[str, Any], *, strict: bool = False) -> 'TraceLocation':
        if strict:
            validate_payload(TraceLocationPayload, data, 'trace location')
        location_type = as_str(data.get('type'), MLFLOW_EXPERIMENT)
        # Unknown types fall back to the experiment variant.
        decoder = _DECODERS.get(location_type, _decode_experiment)
        return decoder(data)


@dataclass(frozen=True)
class MlflowExperimentLocation(TraceLocation):
    """Trace stored under an MLflow experiment."""

    experiment_id: str
    type = MLFLOW_EXPERIMENT

    def to_dict(self) -> dict[str, Any]:
        return {'type': self.type, 'experiment_id': self.experiment_id}


@dataclass(frozen=True)
class InferenceTableLocation(TraceLocation):
    """Trace stored in an inference table (``catalog.database.table_name``)."""

    table_name: str
    database: str | None = None
    catalog: str | None = None
    type = INFERENCE_TABLE

    @property
    def full_table_name(self) -> str:
        return '.'.join(part for part in (self.catalog, self.database, self.table_name) if part)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {'type': self.type, 'table_name': self.table_name}
        if self.database is not None:
            data['database'] = self.database
        if self.catalog is not None:
            data['catalog'] = self.catalog
        return data


def _decode_experiment(data: Mapping[str, Any]) -> TraceLocation:
    return MlflowExperimentLocation(experiment_id=as_str(data.get('experiment_id'), DEFAULT_EXPERIMENT_ID))


def _decode_inference_table(data: Mapping[str, Any]) -> TraceLocation:
    return InferenceTableLocation(
        table_name=as_str(data.get('table_name')),
        database=as_optional_str(data.get('database')),
        catalog=as_optional_str(data.get('catalog')),
    )


_DECODERS: dict[str, Callable[[Mapping[str, Any]], TraceLocation]] = {
    MLFLOW_EXPERIMENT: _decode_experiment,
    INFERENCE_TABLE: _decode_inference_table,
}
