"""
Stage Resolution

Determines the active deployment stage (dev, test, prod, ...) from an
environment switch, falling back to the bootstrap default.
"""

import os
from typing import Mapping, Optional

from omnisettings.observability import get_logger

log = get_logger(__name__)


def env_variable_name(property_name: str) -> str:
    """Shell-friendly form of a switch name: ``omni.stage`` -> ``OMNI_STAGE``."""
    return property_name.upper().replace(".", "_").replace("-", "_")


def lookup_switch(
    property_name: str,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """
    Look up an environment switch.

    The name is tried verbatim first, then in its shell-friendly form.

    Args:
        property_name: Switch name, e.g. ``omni.stage``
        environ: Environment mapping (defaults to os.environ)

    Returns:
        The switch value, or None when the switch is absent
    """
    env = os.environ if environ is None else environ

    value = env.get(property_name)
    if value is None:
        value = env.get(env_variable_name(property_name))
    return value


class StageResolver:
    """
    Resolves the active stage once.

    Example:
        ```python
        resolver = StageResolver("omni.stage", default_stage="dev")
        stage = resolver.resolve()  # "prod" when OMNI_STAGE=prod
        ```
    """

    def __init__(
        self,
        property_name: str,
        default_stage: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.property_name = property_name
        self.default_stage = default_stage
        self._environ = environ

    def resolve(self) -> Optional[str]:
        """Return the switch value, or the default stage when the switch is absent."""
        stage = lookup_switch(self.property_name, self._environ)
        if stage is None:
            log.debug("Stage switch not set, using default", switch=self.property_name,
                      default=self.default_stage)
            return self.default_stage
        return stage
