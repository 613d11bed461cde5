"""Load configuration, profiles, assignments and objects from a directory."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from uuid import NAMESPACE_URL, uuid5

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from shaper.errors import ConfigError
from shaper.models.assignment import Assignment
from shaper.models.config import ShaperConfig
from shaper.models.profile import Profile
from shaper.store.memory import MemoryStore


logger = logging.getLogger(__name__)


def default_content_id(namespace: str, profile: str, content: str):
    """Stable ID for exposed content declared without one."""
    return uuid5(NAMESPACE_URL, f"shaper:{namespace}/{profile}/{content}")


class StoreLoader:
    """Loads a configuration directory into a MemoryStore.

    Layout::

        config.yaml            engine and webhook settings
        profiles/*.yaml        profile name -> profile
        assignments/*.yaml     assignment name -> assignment
        objects/*.yaml         list of objects referenced by object_ref content

    A broken profile, assignment or object file is logged and recorded in
    ``errors``; the rest of the directory still loads.
    """

    def __init__(self, config_dir: Path):
        """Initialize the loader."""
        self.config_dir = Path(config_dir)
        self.yaml = YAML(typ="safe", pure=True)
        self.config: Optional[ShaperConfig] = None
        self.profiles: Dict[str, Profile] = {}
        self.assignments: Dict[str, Assignment] = {}
        self.objects: List[Tuple[Tuple[str, str, str, str, str], Dict[str, Any]]] = []
        self.errors: List[str] = []

    async def load(self) -> MemoryStore:
        """Load every file and return the populated store."""
        logger.info(f"Loading configuration from {self.config_dir}")
        self.errors.clear()

        await self._load_main_config()
        await self._load_profiles()
        await self._load_assignments()
        await self._load_objects()

        logger.info(
            f"Loaded {len(self.profiles)} profile(s), {len(self.assignments)} assignment(s), "
            f"{len(self.objects)} object(s) with {len(self.errors)} error(s)"
        )
        return self.build_store()

    def build_store(self) -> MemoryStore:
        """Create a MemoryStore from the loaded records."""
        store = MemoryStore(
            namespace=self.namespace,
            profiles=self.profiles.values(),
            assignments=self.assignments.values(),
        )
        for key, obj in self.objects:
            store.add_object(*key, obj)
        return store

    @property
    def namespace(self) -> str:
        return self.config.engine.namespace if self.config else "default"

    async def _load_main_config(self):
        """Load main configuration file; a missing file means defaults."""
        config_file = self.config_dir / "config.yaml"
        if not config_file.exists():
            logger.warning(f"Main config not found, using defaults: {config_file}")
            self.config = ShaperConfig()
            return

        try:
            data = await self._read_yaml(config_file)
            self.config = ShaperConfig(**(data or {}))
            logger.debug(f"Loaded main config: {config_file}")
        except (ValidationError, YAMLError, TypeError) as e:
            logger.error(f"Invalid main config: {e}")
            raise ConfigError(f"invalid main config {config_file}") from e

    async def _load_profiles(self):
        """Load profile definitions."""
        self.profiles.clear()
        for yaml_file, data in await self._read_dir("profiles"):
            try:
                for name, spec in self._as_mapping(data).items():
                    spec = dict(spec or {})
                    spec.setdefault("namespace", self.namespace)
                    spec["additional_content"] = self._default_content_ids(
                        spec["namespace"], name, spec.get("additional_content")
                    )
                    self._add_unique(self.profiles, name, Profile(name=name, **spec), yaml_file)
                logger.debug(f"Loaded profiles from {yaml_file}")
            except (ValidationError, ValueError, TypeError) as e:
                self._record_error(yaml_file, e)

    async def _load_assignments(self):
        """Load assignment definitions."""
        self.assignments.clear()
        for yaml_file, data in await self._read_dir("assignments"):
            try:
                for name, spec in self._as_mapping(data).items():
                    spec = dict(spec or {})
                    spec.setdefault("namespace", self.namespace)
                    self._add_unique(self.assignments, name, Assignment(name=name, **spec), yaml_file)
                logger.debug(f"Loaded assignments from {yaml_file}")
            except (ValidationError, ValueError, TypeError) as e:
                self._record_error(yaml_file, e)

    async def _load_objects(self):
        """Load objects referenced by object_ref content."""
        self.objects.clear()
        for yaml_file, data in await self._read_dir("objects"):
            try:
                if not isinstance(data, list):
                    raise TypeError("expected a list of objects")
                for entry in data:
                    key = (
                        entry.get("group", ""),
                        entry["version"],
                        entry["resource"],
                        entry.get("namespace", self.namespace),
                        entry["name"],
                    )
                    obj = entry.get("object")
                    if not isinstance(obj, dict):
                        raise TypeError(f"object {key[3]}/{key[4]} must be a mapping")
                    self.objects.append((key, obj))
                logger.debug(f"Loaded objects from {yaml_file}")
            except (KeyError, AttributeError, TypeError) as e:
                self._record_error(yaml_file, e)

    def _default_content_ids(self, namespace: str, profile: str, content):
        if content is None:
            return {}
        items = content.items() if isinstance(content, dict) else ((None, item) for item in content)
        out = {} if isinstance(content, dict) else []
        for key, item in items:
            item = dict(item or {})
            name = item.get("name", key)
            if item.get("exposed") and not item.get("exposed_uuid"):
                item["exposed_uuid"] = str(default_content_id(namespace, profile, name))
            if isinstance(out, dict):
                out[key] = item
            else:
                out.append(item)
        return out

    async def _read_dir(self, subdir: str) -> List[Tuple[Path, Any]]:
        directory = self.config_dir / subdir
        if not directory.exists():
            logger.warning(f"Directory not found: {directory}")
            return []

        loaded = []
        for yaml_file in sorted(directory.glob("*.yaml")):
            try:
                loaded.append((yaml_file, await self._read_yaml(yaml_file)))
            except (OSError, YAMLError) as e:
                self._record_error(yaml_file, e)
        return loaded

    async def _read_yaml(self, file_path: Path) -> Any:
        """Read and parse YAML file."""
        content = await asyncio.to_thread(file_path.read_text)
        return self.yaml.load(content)

    @staticmethod
    def _as_mapping(data) -> Dict[str, Any]:
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise TypeError("expected a mapping of name to definition")
        return data

    @staticmethod
    def _add_unique(records: Dict[str, Any], name: str, record, yaml_file: Path):
        if name in records:
            raise ValueError(f"{name!r} is defined more than once (again in {yaml_file.name})")
        records[name] = record

    def _record_error(self, yaml_file: Path, error: Exception):
        logger.error(f"Error loading {yaml_file}: {error}")
        self.errors.append(f"{yaml_file}: {error}")
