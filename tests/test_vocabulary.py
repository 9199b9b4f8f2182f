import pytest
import requests

from modoflex.config import settings
from modoflex.vocabulary import (
    RemoteWordSource,
    VocabularyManager,
    WordListError,
    parse_word_pairs,
)


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code
        self.encoding = None

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


def fake_get(routes):
    def get(url, timeout=None):
        result = routes.get(url.rsplit("/", 1)[-1])
        if isinstance(result, Exception):
            raise result
        if result is None:
            return FakeResponse(status_code=404)
        return result

    return get


BASE = "https://example.org/DATA/"


# --- Parser ---
def test_parse_two_fields():
    pairs = parse_word_pairs("kutya;perro\nmacska;gato\n")
    assert [(p.hungarian, p.spanish) for p in pairs] == [
        ("kutya", "perro"),
        ("macska", "gato"),
    ]
    assert [p.id for p in pairs] == [1, 2]
    assert pairs[0].question_note == ""
    assert pairs[0].score == "0"


def test_parse_optional_fields_and_extras_ignored():
    pairs = parse_word_pairs("ház;casa;főnév;la casa;7;extra;more")
    assert len(pairs) == 1
    pair = pairs[0]
    assert pair.question_note == "főnév"
    assert pair.answer_note == "la casa"
    assert pair.score == "7"


def test_parse_skips_short_and_blank_lines():
    text = "egyedül\n\n   \nvíz;agua\n;üres\nüres;\n"
    pairs = parse_word_pairs(text)
    assert [(p.hungarian, p.spanish) for p in pairs] == [("víz", "agua")]


def test_parse_strips_whitespace_and_crlf():
    pairs = parse_word_pairs(" fa ; árbol \r\nalma;manzana\r\n")
    assert [(p.hungarian, p.spanish) for p in pairs] == [
        ("fa", "árbol"),
        ("alma", "manzana"),
    ]


def test_parse_normalizes_to_composed_form():
    decomposed = "a\u0301rbol"
    pairs = parse_word_pairs(f"fa;{decomposed}")
    assert pairs[0].spanish == "árbol"
    assert len(pairs[0].spanish) == 5


# --- Local vocabulary ---
def test_load_all_reads_txt_and_csv(tmp_path):
    (tmp_path / "alap.txt").write_text("kutya;perro\nmacska;gato\n", encoding="utf-8")
    (tmp_path / "extra.csv").write_text(
        "hungarian,spanish,score\nház,casa,3\nfa,,1\n", encoding="utf-8"
    )
    (tmp_path / "old.csv").write_text("word,translation\nvíz,agua\n", encoding="utf-8")

    manager = VocabularyManager(str(tmp_path))
    manager.load_all()

    assert [p.spanish for p in manager.get_words("alap")] == ["perro", "gato"]
    extra = manager.get_words("extra")
    assert [(p.hungarian, p.spanish, p.score) for p in extra] == [("ház", "casa", "3")]
    assert [p.spanish for p in manager.get_words("old")] == ["agua"]
    assert [t["id"] for t in manager.get_topics()] == ["alap", "extra", "old"]


def test_load_all_skips_csv_with_unknown_columns(tmp_path):
    (tmp_path / "bad.csv").write_text("a,b\n1,2\n", encoding="utf-8")
    (tmp_path / "good.txt").write_text("kutya;perro\n", encoding="utf-8")

    manager = VocabularyManager(str(tmp_path))
    manager.load_all()

    assert manager.get_words("bad") == []
    assert manager.get_words("good")


def test_load_all_creates_directory_and_uses_dummy(tmp_path):
    directory = tmp_path / "missing"
    manager = VocabularyManager(str(directory))
    manager.load_all()

    assert directory.exists()
    topics = manager.get_topics()
    assert topics == [{"id": "default_dummy", "name": "Default Dummy", "count": 5}]
    assert all(p.spanish for p in manager.get_words("default_dummy"))


def test_unknown_topic_is_empty(tmp_path):
    manager = VocabularyManager(str(tmp_path))
    manager.load_all()
    assert manager.get_words("nope") == []


# --- Remote source ---
def test_list_files_from_index(monkeypatch):
    monkeypatch.setattr(
        requests, "get", fake_get({"files.txt": FakeResponse("a.txt\n\n b.txt \n")})
    )
    files = RemoteWordSource(BASE).list_files()
    assert [f.name for f in files] == ["a.txt", "b.txt"]
    assert files[1].url == BASE + "b.txt"


@pytest.mark.parametrize(
    "response",
    [FakeResponse(status_code=404), FakeResponse(""), requests.ConnectionError("down")],
)
def test_list_files_falls_back(monkeypatch, response):
    monkeypatch.setattr(requests, "get", fake_get({"files.txt": response}))
    files = RemoteWordSource(BASE).list_files()
    assert [f.name for f in files] == [name for name, _ in settings.FALLBACK_FILES]
    halado = next(f for f in files if f.name == "haladó.txt")
    assert halado.url == BASE + "halado.txt"


def test_fetch_parses_pairs(monkeypatch):
    monkeypatch.setattr(
        requests, "get", fake_get({"data.txt": FakeResponse("ház;casa\nrossz\n")})
    )
    pairs = RemoteWordSource(BASE).fetch("data.txt")
    assert [(p.hungarian, p.spanish) for p in pairs] == [("ház", "casa")]


def test_fetch_not_found(monkeypatch):
    monkeypatch.setattr(requests, "get", fake_get({}))
    with pytest.raises(WordListError, match="not found"):
        RemoteWordSource(BASE).fetch("missing.txt")


def test_fetch_empty_file(monkeypatch):
    monkeypatch.setattr(requests, "get", fake_get({"data.txt": FakeResponse("x\n")}))
    with pytest.raises(WordListError, match="empty or malformed"):
        RemoteWordSource(BASE).fetch("data.txt")


def test_fetch_server_and_network_errors(monkeypatch):
    monkeypatch.setattr(
        requests,
        "get",
        fake_get(
            {
                "a.txt": FakeResponse(status_code=500),
                "b.txt": requests.Timeout("slow"),
            }
        ),
    )
    source = RemoteWordSource(BASE)
    with pytest.raises(WordListError, match="Download failed"):
        source.fetch("a.txt")
    with pytest.raises(WordListError, match="Download failed"):
        source.fetch("b.txt")


def test_manager_without_remote(tmp_path):
    manager = VocabularyManager(str(tmp_path))
    assert manager.list_remote_files() == []
    with pytest.raises(WordListError):
        manager.load_remote("data.txt")
