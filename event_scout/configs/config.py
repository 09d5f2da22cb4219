"""Source configuration loader for Event Scout."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from event_scout.configs.settings import get_settings
from event_scout.schemas.event import SourceDescriptor

logger = logging.getLogger(__name__)


def load_sources(config_path: str | Path | None = None) -> list[SourceDescriptor]:
    """
    Load the ordered source list from YAML.

    The file holds a top-level ``sources`` list (a bare list is accepted too).
    Each entry needs ``id``, ``name``, ``target`` and ``mode``.

    Args:
        config_path: Path to the YAML file. Defaults to SOURCES_CONFIG_PATH.

    Returns:
        SourceDescriptors in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is empty, malformed or repeats a source id
    """
    path = Path(config_path) if config_path else get_settings().SOURCES_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Sources config not found at {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data:
        raise ValueError(f"Sources config {path} is empty or invalid.")

    entries = data.get("sources") if isinstance(data, dict) else data
    if not isinstance(entries, list) or not entries:
        raise ValueError(f"Sources config {path} must define a non-empty 'sources' list.")

    sources: list[SourceDescriptor] = []
    seen: set[str] = set()
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(f"Source #{idx} in {path} is not a mapping")
        try:
            source = SourceDescriptor.model_validate(entry)
        except ValidationError as e:
            raise ValueError(f"Invalid source #{idx} in {path}: {e}") from e
        if source.id in seen:
            raise ValueError(f"Duplicate source id '{source.id}' in {path}")
        seen.add(source.id)
        sources.append(source)

    logger.info(f"Loaded {len(sources)} sources from {path}")
    return sources


def select_sources(
    sources: list[SourceDescriptor], only: list[str] | None = None
) -> list[SourceDescriptor]:
    """
    Keep only the sources whose id is in ``only``, preserving config order.

    Raises:
        ValueError: If ``only`` names an unknown source id
    """
    if not only:
        return list(sources)
    known = {s.id for s in sources}
    unknown = [source_id for source_id in only if source_id not in known]
    if unknown:
        raise ValueError(f"Unknown source ids: {', '.join(unknown)}")
    wanted = set(only)
    return [s for s in sources if s.id in wanted]
