"""
Parameter types, parameter instances and the per-image catalog of what to offer.
"""

import yaml
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from logger import get_logger
from exceptions import CatalogError


@dataclass(frozen=True)
class ParameterType:
    """A kind of command-line value with a fixed flag token"""
    name: str  # Flag token, e.g. '--volume'
    split_on: Optional[str] = None  # Separator for composite values
    editable_index: int = 0  # Segment the user edits when composite

    @property
    def is_composite(self) -> bool:
        return bool(self.split_on)


NAME_PARAM = ParameterType("--name")
VOLUME_PARAM = ParameterType("--volume", split_on=":", editable_index=0)
ENTRYPOINT_PARAM = ParameterType("--entrypoint")
ENV_PARAM = ParameterType("--env", split_on="=", editable_index=1)
PORT_PARAM = ParameterType("-p", split_on=":", editable_index=0)

PARAMETER_TYPES: Dict[str, ParameterType] = {
    p.name: p for p in (NAME_PARAM, VOLUME_PARAM, ENTRYPOINT_PARAM, ENV_PARAM, PORT_PARAM)
}


class RunFlag(str, Enum):
    """Boolean flags that can be switched on for a run"""
    INTERACTIVE = "--interactive"
    TTY = "--tty"
    DETACH = "--detach"


@dataclass
class ParameterInstance:
    """One editable parameter slot"""
    param_type: ParameterType
    candidates: List[str]
    value: str = ""  # Empty means "use candidates[0]"

    @property
    def default(self) -> str:
        return self.candidates[0] if self.candidates else ""

    @property
    def display_value(self) -> str:
        return self.value or self.default

    @property
    def is_edited(self) -> bool:
        return self.value != "" and self.value != self.default


_DEFAULT_IMAGES: Dict[str, Dict[str, Any]] = {
    "alpine": {
        "parameters": [
            (NAME_PARAM, ["alpine-test", "evenCoolerName"]),
            (PORT_PARAM, ["8080:80"]),
            (ENTRYPOINT_PARAM, ["/bin/ash"]),
        ],
        "flags": [RunFlag.INTERACTIVE, RunFlag.TTY],
    },
    "postgres": {
        "parameters": [
            (NAME_PARAM, ["postgresDB", "evenCoolerName"]),
            (PORT_PARAM, ["5432:5432"]),
            (VOLUME_PARAM, [
                "postgres-data:/some/other/container/dir",
                "/yet/another/local/dir:/yet/another/container/dir",
            ]),
            (ENV_PARAM, ["POSTGRES_USER=test-user"]),
            (ENV_PARAM, ["POSTGRES_PASSWORD=test-password"]),
            (ENV_PARAM, ["POSTGRES_DB=test-db"]),
        ],
        "flags": [RunFlag.DETACH],
    },
}


class Catalog:
    """Static lookup of the parameters and flags offered for each image"""

    def __init__(self, images: Optional[Dict[str, Dict[str, Any]]] = None):
        self.logger = get_logger(self.__class__.__name__)
        self._parameters: Dict[str, List[Tuple[ParameterType, List[str]]]] = {}
        self._flags: Dict[str, List[RunFlag]] = {}
        for image, entry in (images or {}).items():
            self._parameters[image] = [(ptype, list(candidates)) for ptype, candidates in entry.get("parameters", [])]
            self._flags[image] = list(entry.get("flags", []))

    @classmethod
    def default(cls) -> 'Catalog':
        """Catalog with the built-in image defaults"""
        return cls(_DEFAULT_IMAGES)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Catalog':
        """Build a catalog from its YAML shape: {images: {name: {flags, parameters}}}"""
        if not isinstance(data, dict) or not isinstance(data.get("images", {}), dict):
            raise CatalogError("Catalog must be a mapping with an 'images' mapping")

        images = {}
        for image, entry in (data.get("images") or {}).items():
            entry = entry or {}
            if not isinstance(entry, dict):
                raise CatalogError(f"{image}: entry must be a mapping with 'parameters' and 'flags'")
            raw_parameters = entry.get("parameters") or []
            if not isinstance(raw_parameters, list):
                raise CatalogError(f"{image}: 'parameters' must be a list")
            raw_flags = entry.get("flags") or []
            if not isinstance(raw_flags, list):
                raise CatalogError(f"{image}: 'flags' must be a list")

            parameters = []
            for i, raw in enumerate(raw_parameters):
                type_name = raw.get("type") if isinstance(raw, dict) else None
                if not isinstance(type_name, str) or type_name not in PARAMETER_TYPES:
                    raise CatalogError(f"{image}: parameter {i} has unknown type {type_name!r}")
                candidates = raw.get("candidates") or []
                if isinstance(candidates, str):
                    candidates = [candidates]
                elif not isinstance(candidates, list):
                    raise CatalogError(f"{image}: parameter {i} ({type_name}) candidates must be a string or a list")
                if not candidates:
                    raise CatalogError(f"{image}: parameter {i} ({type_name}) has no candidate values")
                parameters.append((PARAMETER_TYPES[type_name], [str(c) for c in candidates]))

            flags = []
            for token in raw_flags:
                try:
                    flags.append(RunFlag(token))
                except (TypeError, ValueError):
                    raise CatalogError(f"{image}: unknown flag {token!r}")

            images[str(image)] = {"parameters": parameters, "flags": flags}
        return cls(images)

    @classmethod
    def load(cls, path: str) -> 'Catalog':
        """Load a catalog from a YAML file"""
        logger = get_logger(cls.__name__)
        logger.debug(f"Loading catalog from {path}")
        try:
            with open(Path(path).expanduser(), 'r') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise CatalogError(f"Invalid YAML in catalog {path}: {e}")
        except OSError as e:
            raise CatalogError(f"Could not read catalog {path}: {e}")
        catalog = cls.from_dict(data)
        logger.info(f"Loaded catalog with {len(catalog.images())} image(s) from {path}")
        return catalog

    def images(self) -> List[str]:
        return sorted(set(self._parameters) | set(self._flags))

    def parameters_for(self, image: str) -> List[ParameterInstance]:
        """Fresh parameter instances for an image; unknown images offer nothing"""
        templates = self._parameters.get(image)
        if templates is None:
            self.logger.debug(f"No catalog parameters for image {image!r}")
            return []
        return [ParameterInstance(param_type=ptype, candidates=list(candidates)) for ptype, candidates in templates]

    def flags_for(self, image: str) -> List[RunFlag]:
        return list(self._flags.get(image, []))
