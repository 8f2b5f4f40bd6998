"""
Hand-off of a finished editing session to the run option structures.
"""

import shlex
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from catalog import (
    ParameterType, RunFlag,
    NAME_PARAM, VOLUME_PARAM, ENTRYPOINT_PARAM, ENV_PARAM, PORT_PARAM,
)
from constants import DEFAULT_PROGRAM
from editor import EditorModel
from exceptions import RunTUIError
from logger import get_logger


@dataclass
class RunOptions:
    """Options that belong to the run command itself"""
    name: str = ""
    detach: bool = False


@dataclass
class ContainerOptions:
    """Options describing the container to create"""
    image: str = ""
    volumes: List[str] = field(default_factory=list)
    entrypoint: str = ""
    env: List[str] = field(default_factory=list)
    publish: List[str] = field(default_factory=list)
    stdin: bool = False
    tty: bool = False


class FlagSet:
    """Parsed command-line flags, tracking which ones were set explicitly"""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(values or {})
        self._changed = set()

    def set(self, name: str, value: str):
        self.values[name] = value
        self._changed.add(name)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(name, default)

    def changed(self, name: str) -> bool:
        return name in self._changed


@dataclass
class RunSelection:
    """Values chosen in a finished session, in the order they were offered"""
    image: str
    parameters: List[Tuple[ParameterType, str]] = field(default_factory=list)
    flags: List[RunFlag] = field(default_factory=list)

    def to_argv(self, program: str = DEFAULT_PROGRAM) -> List[str]:
        argv = shlex.split(program)
        argv.extend(flag.value for flag in self.flags)
        for ptype, value in self.parameters:
            argv.extend([ptype.name, value])
        if self.image:
            argv.append(self.image)
        return argv

    def command_line(self, program: str = DEFAULT_PROGRAM) -> str:
        return shlex.join(self.to_argv(program))

    @classmethod
    def from_options(cls, flag_set: FlagSet, run_options: RunOptions,
                     container_options: ContainerOptions) -> 'RunSelection':
        """Describe committed option structures as a selection, e.g. to print them"""
        flags = [flag for flag in RunFlag if flag_set.changed(flag.value)]
        parameters = []
        if run_options.name:
            parameters.append((NAME_PARAM, run_options.name))
        parameters.extend((PORT_PARAM, port) for port in container_options.publish)
        if container_options.entrypoint:
            parameters.append((ENTRYPOINT_PARAM, container_options.entrypoint))
        parameters.extend((VOLUME_PARAM, volume) for volume in container_options.volumes)
        parameters.extend((ENV_PARAM, env) for env in container_options.env)
        return cls(image=container_options.image, parameters=parameters, flags=flags)


def collect(model: EditorModel) -> RunSelection:
    """Read the final values out of a finished model"""
    return RunSelection(
        image=model.image,
        parameters=[(param.param_type, param.display_value) for param in model.parameters],
        flags=list(model.flags),
    )


def _set_name(value: str, run_options: RunOptions, container_options: ContainerOptions):
    run_options.name = value


def _add_volume(value: str, run_options: RunOptions, container_options: ContainerOptions):
    container_options.volumes.append(value)


def _set_entrypoint(value: str, run_options: RunOptions, container_options: ContainerOptions):
    container_options.entrypoint = value


def _add_env(value: str, run_options: RunOptions, container_options: ContainerOptions):
    container_options.env.append(value)


def _add_port(value: str, run_options: RunOptions, container_options: ContainerOptions):
    container_options.publish.append(value)


PARAMETER_SETTERS: Dict[ParameterType, Callable[[str, RunOptions, ContainerOptions], None]] = {
    NAME_PARAM: _set_name,
    VOLUME_PARAM: _add_volume,
    ENTRYPOINT_PARAM: _set_entrypoint,
    ENV_PARAM: _add_env,
    PORT_PARAM: _add_port,
}

# (options object, attribute) switched on by each flag
FLAG_SETTERS: Dict[RunFlag, Tuple[str, str]] = {
    RunFlag.DETACH: ("run", "detach"),
    RunFlag.INTERACTIVE: ("container", "stdin"),
    RunFlag.TTY: ("container", "tty"),
}


def apply_selection(selection: RunSelection, flag_set: FlagSet,
                    run_options: RunOptions, container_options: ContainerOptions):
    """Write a selection into the option structures; runs once per session"""
    logger = get_logger("committer")

    # Resolve every setter before writing anything
    setters = []
    for ptype, value in selection.parameters:
        setter = PARAMETER_SETTERS.get(ptype)
        if setter is None:
            raise RunTUIError(f"No option setter for parameter type {ptype.name}")
        setters.append((setter, value))
    for flag in selection.flags:
        if flag not in FLAG_SETTERS:
            raise RunTUIError(f"No option field for flag {flag.value}")

    for setter, value in setters:
        setter(value, run_options, container_options)
    for flag in selection.flags:
        target, attribute = FLAG_SETTERS[flag]
        setattr(run_options if target == "run" else container_options, attribute, True)
        flag_set.set(flag.value, "true")

    logger.info(f"Applied {len(selection.parameters)} parameter(s) and {len(selection.flags)} flag(s)")
