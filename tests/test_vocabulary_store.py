"""
Tests for the JSON-backed vocabulary store (single write path).
"""
import json
import threading

import pytest

from lingovault import __version__
from lingovault.store import VocabularyStore, normalize_word_item


class TestNormalizeWordItem:
    def test_legacy_entry_is_completed(self):
        word = normalize_word_item({"english": "cat", "chinese": "猫"})
        assert word.english == "cat"
        assert word.id
        assert word.is_mastered == 0
        assert word.created_at > 0
        assert word.source == "user"

    def test_wire_names_are_read(self):
        word = normalize_word_item({
            "id": "w1", "english": "cat", "isMastered": 1, "createdAt": 123,
            "source": "import-250101-0000", "tags": ["n", 5],
        })
        assert (word.id, word.is_mastered, word.created_at) == ("w1", 1, 123)
        assert word.source == "import-250101-0000"
        assert word.tags == ["n"]

    @pytest.mark.parametrize("raw", [{"english": ""}, {"english": "  "}, {"chinese": "猫"}, "cat", None])
    def test_unusable_entries(self, raw):
        assert normalize_word_item(raw) is None


class TestPersistence:
    def test_import_writes_file(self, tmp_path, make_word):
        path = tmp_path / "vocab.json"
        store = VocabularyStore(path)
        assert store.import_words([make_word("cat", "猫"), make_word("dog", "狗")]) == 2

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == __version__
        assert [w["english"] for w in data["words"]] == ["cat", "dog"]
        assert data["words"][0]["createdAt"] == 1_700_000_000_000
        assert "isMastered" in data["words"][0]

        reloaded = VocabularyStore(path)
        assert [w.english for w in reloaded.words()] == ["cat", "dog"]
        assert [w.id for w in reloaded.words()] == [w.id for w in store.words()]

    def test_nothing_new_means_no_write(self, tmp_path, make_word):
        path = tmp_path / "vocab.json"
        store = VocabularyStore(path, words=[make_word("cat")])
        assert store.import_words([make_word("CAT")]) == 0
        assert store.import_words([]) == 0
        assert not path.exists()

    def test_bare_list_file_is_accepted(self, tmp_path):
        path = tmp_path / "legacy.json"
        path.write_text(
            json.dumps([{"english": "cat", "chinese": "猫"}, {"english": ""}, "junk"], ensure_ascii=False),
            encoding="utf-8",
        )
        store = VocabularyStore(path)
        assert len(store) == 1
        assert store.words()[0].source == "user"

    def test_file_without_word_list_is_rejected(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text('{"words": 3}', encoding="utf-8")
        with pytest.raises(ValueError):
            VocabularyStore(path)

    def test_words_returns_a_snapshot(self, make_word):
        store = VocabularyStore(words=[make_word("cat")])
        snapshot = store.words()
        store.import_words([make_word("dog")])
        assert [w.english for w in snapshot] == ["cat"]
        assert [w.english for w in store.words()] == ["dog", "cat"]


def test_concurrent_imports_do_not_lose_words(tmp_path, make_word):
    path = tmp_path / "vocab.json"
    store = VocabularyStore(path)
    threads_count, per_thread = 8, 25
    barrier = threading.Barrier(threads_count)
    results = []

    def worker(n):
        batch = [make_word(f"word-{n}-{i}") for i in range(per_thread)]
        barrier.wait()
        results.append(store.import_words(batch))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(threads_count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(results) == threads_count * per_thread
    assert len(store) == threads_count * per_thread
    assert len(VocabularyStore(path)) == threads_count * per_thread


def test_concurrent_duplicate_imports_insert_once(make_word):
    store = VocabularyStore()
    barrier = threading.Barrier(4)
    results = []

    def worker():
        batch = [make_word("shared"), make_word("also-shared")]
        barrier.wait()
        results.append(store.import_words(batch))

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == [0, 0, 0, 2]
    assert len(store) == 2


def test_len_while_importing(make_word):
    store = VocabularyStore()
    stop = threading.Event()
    sizes = []

    def reader():
        while not stop.is_set():
            sizes.append(len(store))

    watcher = threading.Thread(target=reader)
    watcher.start()
    for i in range(50):
        store.import_words([make_word(f"w{i}")])
    stop.set()
    watcher.join()

    assert len(store) == 50
    assert all(0 <= size <= 50 for size in sizes)
    assert sizes == sorted(sizes)
