import abc
import os
from typing import Final, Mapping, Protocol, runtime_checkable

ENV_DEBUG: Final = "USTAR_DEBUG"

TRUTHY_ENV_VAR_VALUES: Final = {"1", "true", "x", "y", "yes"}


def is_env_var_truthy(env: Mapping[str, str], var: str) -> bool:
    if v := env.get(var):
        return v.lower() in TRUTHY_ENV_VAR_VALUES
    return False


@runtime_checkable
class ProvidesGlobalMode(Protocol):
    @property
    def is_debug(self) -> bool: ...


class GlobalModeProvider(metaclass=abc.ABCMeta):
    """
    Abstract base class for global mode providers.
    """

    @property
    @abc.abstractmethod
    def is_debug(self) -> bool:
        return False


class EnvGlobalModeProvider(GlobalModeProvider):
    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        if env is None:
            env = os.environ

        self._is_debug = is_env_var_truthy(env, ENV_DEBUG)

    @property
    def is_debug(self) -> bool:
        return self._is_debug
