import glob
import logging
import os
import unicodedata
from typing import Any, Dict, List, Optional

import pandas as pd
import requests

from .config import settings
from .models import RemoteFile, WordPair

logger = logging.getLogger(__name__)

MAX_FIELDS = 5


class WordListError(Exception):
    """A word list could not be fetched or contained no usable entries."""


def _clean(field: str) -> str:
    return unicodedata.normalize("NFC", field.strip())


def parse_word_pairs(text: str) -> List[WordPair]:
    """Parses ``source;target[;question_note[;answer_note[;score]]]`` lines.

    Lines with fewer than two fields, or with an empty source or target,
    are skipped. Fields past the fifth are ignored.
    """
    pairs: List[WordPair] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        fields = [_clean(f) for f in line.split(";")][:MAX_FIELDS]
        if len(fields) < 2 or not fields[0] or not fields[1]:
            logger.debug(f"Skipping incomplete line: {line!r}")
            continue
        fields += [""] * (MAX_FIELDS - len(fields))
        pairs.append(
            WordPair(
                id=len(pairs) + 1,
                hungarian=fields[0],
                spanish=fields[1],
                question_note=fields[2],
                answer_note=fields[3],
                score=fields[4] or "0",
            )
        )
    return pairs


def read_csv_pairs(file_path: str) -> List[WordPair]:
    df = pd.read_csv(file_path, encoding="utf-8", dtype=str).fillna("")
    if {"hungarian", "spanish"}.issubset(df.columns):
        source_col, target_col = "hungarian", "spanish"
    elif {"word", "translation"}.issubset(df.columns):
        source_col, target_col = "word", "translation"
    else:
        raise WordListError(f"Missing columns in {os.path.basename(file_path)}")

    pairs: List[WordPair] = []
    for record in df.to_dict("records"):
        hungarian = _clean(record[source_col])
        spanish = _clean(record[target_col])
        if not hungarian or not spanish:
            continue
        pairs.append(
            WordPair(
                id=len(pairs) + 1,
                hungarian=hungarian,
                spanish=spanish,
                question_note=_clean(record.get("question_note", "")),
                answer_note=_clean(record.get("answer_note", "")),
                score=_clean(record.get("score", "")) or "0",
            )
        )
    return pairs


# --- Remote source ---
class RemoteWordSource:
    """Fetches word lists published as plain files under one base URL."""

    def __init__(self, base_url: str, timeout: float = settings.REQUEST_TIMEOUT):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout

    def _fallback_files(self) -> List[RemoteFile]:
        return [
            RemoteFile(name=name, url=f"{self.base_url}{path}")
            for name, path in settings.FALLBACK_FILES
        ]

    def list_files(self) -> List[RemoteFile]:
        """Reads ``files.txt``; falls back to a fixed list when unavailable."""
        try:
            response = requests.get(f"{self.base_url}files.txt", timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Could not load files.txt, using fallback list: {e}")
            return self._fallback_files()

        response.encoding = "utf-8"
        files = [
            RemoteFile(name=name, url=f"{self.base_url}{name}")
            for name in (line.strip() for line in response.text.splitlines())
            if name
        ]
        if not files:
            logger.warning("files.txt is empty, using fallback list")
            return self._fallback_files()

        logger.info(f"Loaded {len(files)} file names from files.txt")
        return files

    def fetch(self, file_name: str) -> List[WordPair]:
        url = f"{self.base_url}{file_name}"
        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise WordListError(f"Download failed: {file_name} ({e})") from e

        if response.status_code == 404:
            raise WordListError(f"File not found: {file_name}")
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise WordListError(f"Download failed: {file_name} ({e})") from e

        response.encoding = "utf-8"
        pairs = parse_word_pairs(response.text)
        if not pairs:
            raise WordListError(f"File is empty or malformed: {file_name}")

        logger.info(f"Loaded {len(pairs)} words from {file_name}")
        return pairs


# --- Service Layer: Vocabulary Management ---
class VocabularyManager:
    """Manages loading and accessing vocabulary sets."""

    def __init__(self, directory: str, remote: Optional[RemoteWordSource] = None):
        self.directory = directory
        self.remote = remote
        self.vocab_sets: Dict[str, List[WordPair]] = {}

    def load_all(self):
        self.vocab_sets = {}
        if not os.path.exists(self.directory):
            os.makedirs(self.directory)
            logger.warning(
                f"Created directory {self.directory}. Please add word list files."
            )

        for file_path in sorted(glob.glob(os.path.join(self.directory, "*.txt"))):
            file_name = os.path.splitext(os.path.basename(file_path))[0]
            try:
                with open(file_path, encoding="utf-8") as f:
                    pairs = parse_word_pairs(f.read())
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Failed to load {file_path}: {e}")
                continue
            self._register(file_name, pairs)

        for file_path in sorted(glob.glob(os.path.join(self.directory, "*.csv"))):
            file_name = os.path.splitext(os.path.basename(file_path))[0]
            try:
                pairs = read_csv_pairs(file_path)
            except (OSError, ValueError, WordListError) as e:
                logger.error(f"Failed to load {file_path}: {e}")
                continue
            self._register(file_name, pairs)

        if not self.vocab_sets:
            logger.warning("No word lists found. Loading dummy data.")
            self.vocab_sets["default_dummy"] = [
                WordPair(id=1, hungarian="kutya", spanish="perro"),
                WordPair(id=2, hungarian="macska", spanish="gato"),
                WordPair(id=3, hungarian="ház", spanish="casa"),
                WordPair(id=4, hungarian="víz", spanish="agua"),
                WordPair(id=5, hungarian="fa", spanish="árbol"),
            ]

    def _register(self, name: str, pairs: List[WordPair]):
        if not pairs:
            logger.error(f"Skipping {name}: no valid lines.")
            return
        self.vocab_sets[name] = pairs
        logger.info(f"Loaded {len(pairs)} words from {name}")

    def get_words(self, topic: str) -> List[WordPair]:
        return self.vocab_sets.get(topic, [])

    def get_topics(self) -> List[Dict[str, Any]]:
        topics = []
        for key, words in self.vocab_sets.items():
            display_name = key.replace("_", " ").title()
            topics.append({"id": key, "name": display_name, "count": len(words)})
        topics.sort(key=lambda x: x["name"])
        return topics

    def list_remote_files(self) -> List[RemoteFile]:
        if self.remote is None:
            return []
        return self.remote.list_files()

    def load_remote(self, file_name: str) -> List[WordPair]:
        if self.remote is None:
            raise WordListError("No remote word source configured")
        return self.remote.fetch(file_name)
