"""Hydra ConfigStore registration for oracles and backbones."""

from __future__ import annotations

from typing import Any

from hydra.core.config_store import ConfigStore
from loguru import logger


def register(
    cls: type[Any] | None = None,
    *,
    group: str | None = None,
    name: str | None = None,
    **defaults: Any,
) -> type[Any] | Any:
    """Decorator storing a ``_target_`` node for ``cls`` in Hydra's ConfigStore.

    This lets the evaluation config select an implementation by name, e.g.
    ``oracle=onnx`` or ``oracle/model=resnet18``.

    Arguments:
        cls: The class to register.
        group: ConfigStore group.  Defaults to the parent package name
            (``video_quality.inference.onnx_oracle`` -> ``inference``).
        name: Config name.  Defaults to the class name.
        **defaults: Default values written into the node next to ``_target_``.
    """

    def _store(target_cls: type[Any]) -> type[Any]:
        config_group = group or target_cls.__module__.split(".")[-2]
        config_name = name or target_cls.__name__
        node: dict[str, Any] = {
            "_target_": f"{target_cls.__module__}.{target_cls.__qualname__}",
            **defaults,
        }
        ConfigStore.instance().store(group=config_group, name=config_name, node=node)
        logger.debug(
            f"Registered {target_cls.__name__} as '{config_group}/{config_name}'"
        )
        return target_cls

    if cls is None:
        return _store
    return _store(cls)
