"""Model set: a named bundle of LookML models a role may query."""

from __future__ import annotations

import logging
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..exceptions import NotFoundError
from ..interfaces import RemoteService
from ..models import ModelSet
from ..outcomes import Vanished
from .kinds import ObjectKind

logger = logging.getLogger(__name__)


class ModelSetSpec(BaseModel):
    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1)
    models: set[str] = Field(default_factory=set)


class ModelSetState(BaseModel):
    id: str
    name: str
    models: set[str] = Field(default_factory=set)
    built_in: bool = False
    all_access: bool = False
    url: Optional[str] = None

    @classmethod
    def from_remote(cls, ms: ModelSet) -> "ModelSetState":
        return cls(
            id=ms.id,
            name=ms.name,
            models=set(ms.models),
            built_in=ms.built_in,
            all_access=ms.all_access,
            url=ms.url,
        )


class ModelSetUnit:
    kind = ObjectKind.MODEL_SET
    spec_model = ModelSetSpec
    state_model = ModelSetState

    def __init__(self, service: RemoteService) -> None:
        self._service = service

    def create(self, spec: ModelSetSpec) -> ModelSetState:
        ms = self._service.create_model_set(spec.name, sorted(spec.models))
        logger.info("Created model set %s (%s)", ms.id, ms.name)
        return ModelSetState.from_remote(ms)

    def read(self, state: ModelSetState) -> Union[ModelSetState, Vanished]:
        try:
            ms = self._service.get_model_set(state.id)
        except NotFoundError:
            return Vanished(kind=self.kind.value, object_id=state.id)
        return ModelSetState.from_remote(ms)

    def requires_replacement(self, spec: ModelSetSpec, state: ModelSetState) -> bool:
        return False

    def has_changes(self, spec: ModelSetSpec, state: ModelSetState) -> bool:
        return spec.name != state.name or spec.models != state.models

    def update(self, spec: ModelSetSpec, state: ModelSetState) -> ModelSetState:
        if not self.has_changes(spec, state):
            return state
        ms = self._service.update_model_set(state.id, spec.name, sorted(spec.models))
        return ModelSetState.from_remote(ms)

    def delete(self, state: ModelSetState) -> None:
        self._service.delete_model_set(state.id)

    def import_state(self, identifier: str) -> ModelSetState:
        return ModelSetState.from_remote(self._service.get_model_set(identifier))


__all__ = ["ModelSetSpec", "ModelSetState", "ModelSetUnit"]
