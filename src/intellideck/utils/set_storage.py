"""
Study Set Storage
Export study sets to JSON files and load them back from a folder
"""
import json
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Tuple, Union

from loguru import logger
from pydantic import ValidationError

from intellideck.models.flashcard_models import StudySet

PathLike = Union[str, Path]


class InvalidSetFile(ValueError):
    """Raised when a file does not hold a {topic, cards} study set"""


def set_filename(topic: str) -> str:
    """
    Derive the export filename for a topic

    Args:
        topic: Study set topic, e.g. "Biology Chapter 4"

    Returns:
        Lowercased name with non-alphanumerics replaced, e.g. "biology_chapter_4.json"
    """
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', topic).lower()}.json"


def dump_set(study_set: StudySet) -> str:
    """Serialize a set with camelCase card fields; star flags are kept"""
    return json.dumps(study_set.model_dump(by_alias=True), ensure_ascii=False, indent=2)


def export_set(study_set: StudySet, output_dir: PathLike) -> Path:
    """
    Write a study set to <output_dir>/<set_filename(topic)>

    Args:
        study_set: Set to export
        output_dir: Target directory, created if missing

    Returns:
        Path of the written file
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    output_path = directory / set_filename(study_set.topic)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(dump_set(study_set))
    logger.info(f"Exported '{study_set.topic}' ({len(study_set.cards)} cards) to {output_path}")
    return output_path


def parse_set(text: str) -> StudySet:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidSetFile(f"Not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise InvalidSetFile("Expected a JSON object")
    topic = data.get("topic")
    if not isinstance(topic, str) or not topic.strip():
        raise InvalidSetFile("'topic' must be a non-empty string")
    if not isinstance(data.get("cards"), list):
        raise InvalidSetFile("'cards' must be a list")

    try:
        return StudySet.model_validate(data)
    except ValidationError as e:
        raise InvalidSetFile(f"Malformed cards: {e.error_count()} error(s)") from e


def load_sets(
    files: Iterable[PathLike],
    existing_topics: Optional[Iterable[str]] = None,
) -> List[StudySet]:
    """
    Load every valid .json study set from a batch of files

    Bad files are skipped with a warning. A topic already present in
    existing_topics, or seen earlier in the batch, is dropped.

    Args:
        files: Candidate file paths (non-.json files are ignored)
        existing_topics: Topics already in the library

    Returns:
        Newly loaded sets, in input order
    """
    def documents() -> Iterator[Tuple[str, bytes]]:
        for file_path in files:
            path = Path(file_path)
            try:
                yield path.name, path.read_bytes()
            except OSError as e:
                logger.warning(f"Skipping {path.name}: {e}")

    return collect_sets(documents(), existing_topics)


def collect_sets(
    documents: Iterable[Tuple[str, bytes]],
    existing_topics: Optional[Iterable[str]] = None,
) -> List[StudySet]:
    """Parse (filename, content) pairs, skipping bad files and repeated topics"""
    seen: Set[str] = set(existing_topics or [])
    loaded: List[StudySet] = []

    for name, content in documents:
        if not name.lower().endswith(".json"):
            continue
        try:
            study_set = parse_set(content.decode('utf-8'))
        except (UnicodeDecodeError, InvalidSetFile) as e:
            logger.warning(f"Skipping {name}: {e}")
            continue
        if study_set.topic in seen:
            logger.info(f"Skipping {name}: topic '{study_set.topic}' already loaded")
            continue
        seen.add(study_set.topic)
        loaded.append(study_set)

    return loaded


def load_folder(folder: PathLike, existing_topics: Optional[Iterable[str]] = None) -> List[StudySet]:
    directory = Path(folder)
    if not directory.is_dir():
        return []
    return load_sets(sorted(directory.rglob("*.json")), existing_topics)
